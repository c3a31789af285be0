import os
import requests
import threading
import time

# Start de server met PARKLEDGER_TOKENS="loadadmin=loadadmin:ADMIN,loaduser=loaduser:USER"
BASE_URL = os.environ.get("PARKLEDGER_URL", "http://localhost:8000")
ADMIN_TOKEN = os.environ.get("PARKLEDGER_ADMIN_TOKEN", "loadadmin")
USER_TOKEN = os.environ.get("PARKLEDGER_USER_TOKEN", "loaduser")
NUM_CONCURRENT_REQUESTS = 50
LOT_CAPACITY = 10 # minder plekken dan requests, zodat de laatste plekken bevochten worden


def create_lot():
    response = requests.post(
        f"{BASE_URL}/parking-lots",
        json={"name": "Load Test Lot", "capacity": LOT_CAPACITY, "tariff": 2.0, "daytariff": 12.0},
        headers={"Authorization": f"Bearer {ADMIN_TOKEN}"},
    )
    response.raise_for_status()
    return response.json()["id"]


def send_request(thread_id, lot_id, results, lock):
    headers = {"Authorization": f"Bearer {USER_TOKEN}"}
    try:
        start_time = time.time()
        response = requests.post(
            f"{BASE_URL}/parking-lots/{lot_id}/sessions/start",
            json={"licenseplate": f"LOAD-{thread_id:03d}"},
            headers=headers,
        )
        duration = (time.time() - start_time) * 1000

        with lock:
            results.append((response.status_code, duration))
        print(f"Thread {thread_id}: Status {response.status_code}, Time: {duration:.2f} ms")
    except requests.exceptions.RequestException as e:
        with lock:
            results.append((None, 0))
        print(f"Thread {thread_id}: Request Error - {e}")


def main():
    lot_id = create_lot()
    print(f"Starting load test with {NUM_CONCURRENT_REQUESTS} concurrent session starts on lot {lot_id}")
    threads = []
    results = []
    lock = threading.Lock()

    start_test_time = time.time()

    for i in range(NUM_CONCURRENT_REQUESTS):
        thread = threading.Thread(target=send_request, args=(i, lot_id, results, lock))
        threads.append(thread)
        thread.start()

    for thread in threads:
        thread.join()

    total_test_duration = (time.time() - start_test_time) * 1000

    started = [d for status, d in results if status == 201]
    full = [d for status, d in results if status == 409]
    errors = [status for status, _ in results if status not in (201, 409)]

    lot = requests.get(f"{BASE_URL}/parking-lots/{lot_id}").json()

    print("\n--- Load Test Results ---")
    print(f"Total Requests: {len(results)}")
    print(f"Sessions Started: {len(started)}")
    print(f"Rejected (lot full): {len(full)}")
    print(f"Errors: {len(errors)}")
    print(f"Reserved / capacity: {lot['reserved']} / {lot['capacity']}")
    print(f"Total Test Duration: {total_test_duration:.2f} ms")

    timings = started + full
    if timings:
        print(f"Average Response Time: {sum(timings) / len(timings):.2f} ms")

    if len(started) == LOT_CAPACITY and lot["reserved"] == LOT_CAPACITY and not errors:
        print("STATUS: PASSED - Capacity was never oversold.")
    else:
        print("STATUS: FAILED - Started sessions do not match the lot capacity.")


if __name__ == "__main__":
    main()
