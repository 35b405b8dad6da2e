"""
Example client for the Monopoly GO event scraper API.
Demonstrates how to trigger a scrape from an external program and follow
its progress stream.

Requirements:
    pip install -e .

Usage:
    mgo-events serve &
    python examples/api_client_example.py
"""

import requests

from mgo_events.api.client import ScrapeEventsClient
from mgo_events.core.interfaces import ScraperConnectionError

# Configuration
API_BASE_URL = "http://localhost:8080"  # Change this to wherever `mgo-events serve` runs


def check_health():
    """
    Checks if the API server is running and responsive.

    Returns:
        dict: Health check response
    """
    url = f"{API_BASE_URL}/api/health"

    try:
        response = requests.get(url, timeout=5)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        print(f"Error checking health: {e}")
        return None


def follow_scrape(client):
    """
    Prints each step transition as the scrape runs.

    Returns:
        dict: The final record, or None if the stream ended early
    """
    for record in client.stream():
        if record.get("type") == "progress":
            running = [m["name"] for m in record["methods"] if m["state"] == "running"]
            failed = [m for m in record["methods"] if m["state"] == "failed"]
            print(f"   [{record['progress']:3d}%] {', '.join(running) or '-'}")
            for step in failed:
                print(f"   ❌ {step['name']}: {step.get('error')}")
        elif record.get("type") == "final":
            return record
    return None


# Example usage
if __name__ == "__main__":
    print("Monopoly GO Event Scraper API Client Example")
    print("=" * 50)

    # 1. Check API health
    print("\n1. Checking API health...")
    health = check_health()
    if health:
        print(f"   Status: {health.get('status')}")
        print(f"   Browser enabled: {health.get('browserEnabled')}")
    else:
        print("   ❌ API server is not reachable!")
        print("   Make sure the server is running (mgo-events serve)")
        exit(1)

    # 2. Run a scrape and follow its progress
    print("\n2. Scraping the event schedule...")
    client = ScrapeEventsClient(API_BASE_URL)
    try:
        final = follow_scrape(client)
    except ScraperConnectionError as e:
        print(f"   ❌ {e}")
        exit(1)

    if final is None:
        print("   ❌ Stream ended without a result")
        exit(1)

    # 3. Show the result
    print("\n3. Result")
    if final["success"]:
        print(f"   ✅ Scraped with {final['successfulMethodName']}")
    elif "events" in final:
        print(f"   ⚠️  {final['error']}")
    else:
        print(f"   ❌ {final['error']}")
        exit(1)

    for date_key, events in final["events"].items():
        print(f"\n   {date_key}")
        for event in events:
            print(f"     {event['startTime'][11:16]}-{event['endTime'][11:16]}  "
                  f"{event['name']} ({event['category']}, {event['duration']})")

    print("\n" + "=" * 50)
    print("Done!")
