#!/usr/bin/env python3
"""
Smoke test for a LifeLog deployment.
Checks that the shell page and health endpoint respond and that
protected endpoints reject anonymous requests.
"""
import os
import sys

import requests

BASE_URL = os.getenv("SMOKE_BASE_URL", "http://localhost:8000")

# (path, name, expected status)
ROUTES = [
    ("/", "App shell", 200),
    ("/api/health", "Health", 200),
    ("/api/dashboard/stats", "Dashboard (anonymous)", 401),
    ("/api/entries", "Entries (anonymous)", 401),
]


def check_route(path, name, expected):
    """Check a single route"""
    url = BASE_URL + path
    try:
        response = requests.get(url, timeout=10)
        if response.status_code == expected:
            print(f"OK   {name:25} ({response.status_code})")
            return True
        print(f"FAIL {name:25} (status {response.status_code}, expected {expected})")
        return False
    except requests.exceptions.RequestException as e:
        print(f"ERR  {name:25} {e}")
        return False


def main():
    """Run smoke tests"""
    print(f"\nRunning smoke tests on {BASE_URL}\n")
    print("-" * 50)

    results = [check_route(path, name, expected) for path, name, expected in ROUTES]

    print("-" * 50)
    passed = sum(results)
    total = len(results)
    print(f"\nPassed: {passed}/{total}")

    sys.exit(0 if passed == total else 1)


if __name__ == "__main__":
    main()
