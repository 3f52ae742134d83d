"""
Batch verifier: posts every .txt file in a folder to a running VerifyX API
and writes the verdicts to a CSV file.

    python batch_verify.py testcase/scam --api-url http://localhost:8000/api/verify
"""
import os
import csv
import time
import argparse
import requests
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List

# ================= CONFIGURATION =================
DEFAULT_API_URL = "http://localhost:8000/api/verify"
DEFAULT_OUTPUT_CSV = "verify_results.csv"
DEFAULT_WORKERS = 4
REQUEST_TIMEOUT = 30
CSV_FIELDS = ['file', 'category', 'score', 'reasons', 'status']
# =================================================

def verify_file(file_path: str, api_url: str = DEFAULT_API_URL) -> Dict:
    """Sends a single text file to the API and returns the result."""
    file_name = os.path.basename(file_path)

    try:
        with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
            text = f.read()

        start_time = time.time()
        response = requests.post(api_url, json={'type': 'text', 'value': text}, timeout=REQUEST_TIMEOUT)
        duration = time.time() - start_time

        if response.status_code == 200:
            data = response.json()
            category = data.get('category', 'unknown')
            score = data.get('score', 0)
            icon = {'high': '🔴', 'medium': '🟡', 'low': '🟢'}.get(category, '⚪')

            print(f"{icon} {file_name[:25]:<25} | {category:<6} ({score}) | {duration:.2f}s")

            return {
                'file': file_name,
                'category': category,
                'score': score,
                'reasons': '; '.join(data.get('reasons', [])),
                'status': 'SUCCESS'
            }
        else:
            print(f"⚠️ {file_name} | API Error: {response.status_code}")
            return {'file': file_name, 'status': 'API_ERROR'}

    except requests.RequestException as e:
        print(f"❌ {file_name} | Failed: {str(e)}")
        return {'file': file_name, 'status': 'CONNECTION_ERROR'}
    except OSError as e:
        print(f"❌ {file_name} | Unreadable: {str(e)}")
        return {'file': file_name, 'status': 'READ_ERROR'}

def collect_files(folder_path: str) -> List[str]:
    if not os.path.isdir(folder_path):
        print(f"❌ Folder not found: {folder_path}")
        return []
    return sorted(
        os.path.join(folder_path, f)
        for f in os.listdir(folder_path)
        if f.endswith('.txt') and os.path.isfile(os.path.join(folder_path, f))
    )

def write_csv(results: List[Dict], output_path: str) -> None:
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in results:
            writer.writerow({key: row.get(key, '') for key in CSV_FIELDS})

def run_batch(folder_path: str, api_url: str = DEFAULT_API_URL,
              output_path: str = DEFAULT_OUTPUT_CSV, workers: int = DEFAULT_WORKERS) -> List[Dict]:
    files = collect_files(folder_path)
    if not files:
        return []

    print(f"📦 Found {len(files)} files, verifying with {workers} workers...")

    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(lambda path: verify_file(path, api_url), files))

    write_csv(results, output_path)

    successful = [r for r in results if r.get('status') == 'SUCCESS']
    flagged = sum(1 for r in successful if r['category'] in ('high', 'medium'))

    print("\n" + "="*50)
    print("📊 VERIFICATION REPORT")
    print("="*50)
    print(f"Verified: {len(successful)}/{len(results)} | Flagged (medium/high): {flagged}")
    print(f"Results written to {output_path}")
    print("="*50)

    return results

def main():
    parser = argparse.ArgumentParser(description="Verify a folder of text files against the VerifyX API")
    parser.add_argument('folder', help="folder containing .txt files")
    parser.add_argument('--api-url', default=DEFAULT_API_URL)
    parser.add_argument('--output', default=DEFAULT_OUTPUT_CSV)
    parser.add_argument('--workers', type=int, default=DEFAULT_WORKERS)
    args = parser.parse_args()

    run_batch(args.folder, args.api_url, args.output, args.workers)

if __name__ == "__main__":
    main()
