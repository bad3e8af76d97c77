#!/usr/bin/env python3
"""
Data seeding script for the POS Sync Backend.

This script plays the part of a till: it pushes realistic mock POS records
through the sync API in batches, provokes a conflict, pulls everything back
page by page and checks the diagnostics.

Usage:
    python scripts/seed_data.py [--api-url http://localhost:8000] [--dry-run] [--delay 0.1]

    # Quick test with minimal data
    python scripts/seed_data.py --test

    # Seed another tenant
    python scripts/seed_data.py --client-id 2 --branch-id 1
"""

import argparse
import os
import random
import sys
import time
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from collections import defaultdict

import httpx
from faker import Faker

# Tokens are minted with the backend's own secret
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
from app.core.auth import create_access_token  # noqa: E402
from app.core.config import settings  # noqa: E402

# Initialize Faker for generating realistic mock data
fake = Faker('ar_EG')  # Tills are mostly Egyptian shops

CATEGORIES = [
    ("مشروبات", "Drinks", "#1E88E5"),
    ("ألبان", "Dairy", "#FDD835"),
    ("مخبوزات", "Bakery", "#8D6E63"),
    ("منظفات", "Cleaning", "#43A047"),
    ("حلويات", "Sweets", "#E53935"),
]

PRODUCT_NAMES = [
    "شاي", "قهوة", "عصير مانجو", "مياه معدنية", "لبن", "جبنة بيضاء", "زبادي",
    "عيش بلدي", "كرواسون", "صابون", "مسحوق غسيل", "شوكولاتة", "بسكويت", "سكر", "أرز",
]

PAYMENT_METHODS = [("نقدي", "cash"), ("فيزا", "card"), ("محفظة إلكترونية", "wallet")]


class Colors:
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    RESET = '\033[0m'
    BOLD = '\033[1m'


class SeedingStats:
    """Track statistics during the seeding process."""

    def __init__(self):
        self.synced = defaultdict(int)
        self.failed = defaultdict(int)
        self.conflicts = 0
        self.pulled = 0
        self.assertions_passed = 0
        self.assertions_failed = 0
        self.errors = []

    def record_batch(self, records: List[Dict[str, Any]], response: Dict[str, Any]):
        failed_ids = {error["record_id"] for error in response.get("errors", [])}
        conflict_ids = {conflict["record_id"] for conflict in response.get("conflicts", [])}
        for record in records:
            if record["record_id"] in failed_ids:
                self.failed[record["entity_name"]] += 1
            elif record["record_id"] not in conflict_ids:
                self.synced[record["entity_name"]] += 1
        self.conflicts += len(conflict_ids)
        for error in response.get("errors", []):
            self.errors.append(f"[{error['entity_name']}/{error['record_id']}] {error['error']}")

    def record_failed(self, entity_type: str, error: str, status_code: Optional[int] = None):
        self.failed[entity_type] += 1
        if status_code:
            self.errors.append(f"[{entity_type}] HTTP {status_code}: {error}")
        else:
            self.errors.append(f"[{entity_type}] {error}")

    def assert_true(self, condition: bool, message: str):
        """Assert a condition and track the result."""
        if condition:
            self.assertions_passed += 1
        else:
            self.assertions_failed += 1
            self.errors.append(f"ASSERTION FAILED: {message}")
            print(f"{Colors.RED}✗ Assertion failed: {message}{Colors.RESET}")

    def print_summary(self):
        """Print a summary of the seeding process."""
        print(f"\n{Colors.BOLD}{Colors.CYAN}{'='*80}{Colors.RESET}")
        print(f"{Colors.BOLD}{Colors.CYAN}SEEDING SUMMARY{Colors.RESET}")
        print(f"{Colors.CYAN}{'='*80}{Colors.RESET}\n")

        print(f"{Colors.BOLD}Records Synced:{Colors.RESET}")
        for entity_name, count in sorted(self.synced.items()):
            print(f"  {Colors.GREEN}✓{Colors.RESET} {entity_name}: {count}")

        if self.failed:
            print(f"\n{Colors.BOLD}Records Failed:{Colors.RESET}")
            for entity_name, count in sorted(self.failed.items()):
                print(f"  {Colors.RED}✗{Colors.RESET} {entity_name}: {count}")

        print(f"\n{Colors.BOLD}Conflicts reported:{Colors.RESET} {self.conflicts}")
        print(f"{Colors.BOLD}Changes pulled:{Colors.RESET} {self.pulled}")

        print(f"\n{Colors.BOLD}Assertions:{Colors.RESET}")
        print(f"  {Colors.GREEN}Passed:{Colors.RESET} {self.assertions_passed}")
        if self.assertions_failed > 0:
            print(f"  {Colors.RED}Failed:{Colors.RESET} {self.assertions_failed}")

        if self.errors:
            print(f"\n{Colors.BOLD}{Colors.RED}Errors:{Colors.RESET}")
            for error in self.errors[:10]:  # Show first 10 errors
                print(f"  {Colors.RED}•{Colors.RESET} {error}")
            if len(self.errors) > 10:
                print(f"  {Colors.YELLOW}... and {len(self.errors) - 10} more errors{Colors.RESET}")

        print(f"\n{Colors.CYAN}{'='*80}{Colors.RESET}")

        # Return exit code based on success
        return 0 if self.assertions_failed == 0 and not self.failed else 1


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


class TillSimulator:
    """Pushes and pulls POS data the way a till does."""

    def __init__(
        self,
        api_url: str,
        client_id: str,
        branch_id: str,
        device_id: str,
        dry_run: bool = False,
        delay: float = 0.1
    ):
        self.api_url = api_url.rstrip('/')
        self.client_id = client_id
        self.branch_id = branch_id
        self.device_id = device_id
        self.dry_run = dry_run
        self.delay = delay  # Delay between requests to avoid overwhelming the API
        self.client = httpx.Client(timeout=30.0)
        self.stats = SeedingStats()

        # Generated records, kept for relationships and validation
        self.records: Dict[str, List[Dict[str, Any]]] = defaultdict(list)

        self.token = create_access_token({
            "sub": "seed-script",
            "client_id": client_id,
            "branch_id": branch_id,
            "device_id": device_id
        })

        print(f"{Colors.BOLD}{Colors.BLUE}POS Sync Seeding Script{Colors.RESET}")
        print(f"API URL: {Colors.CYAN}{self.api_url}{Colors.RESET}")
        print(f"Tenant: {Colors.CYAN}client={client_id} branch={branch_id} device={device_id}{Colors.RESET}")
        print(f"Dry Run: {Colors.YELLOW if dry_run else Colors.GREEN}{dry_run}{Colors.RESET}\n")

    def _make_request(self, method: str, endpoint: str, **kwargs) -> Optional[httpx.Response]:
        """Make an authenticated HTTP request with error handling."""
        if self.dry_run and method.upper() not in ['GET', 'HEAD']:
            print(f"{Colors.YELLOW}[DRY RUN]{Colors.RESET} {method} {endpoint}")
            return None

        url = f"{self.api_url}{endpoint}"
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            response = self.client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            print(f"\n{Colors.RED}Request failed: {method} {endpoint}{Colors.RESET}")
            print(f"{Colors.RED}Error: {str(e)}{Colors.RESET}")
            return None

        if response.status_code >= 400:
            try:
                error_detail = response.json().get("detail", response.text[:200])
            except ValueError:
                error_detail = response.text[:200]
            print(f"\n{Colors.RED}✗ {method} {endpoint} - Status {response.status_code}{Colors.RESET}")
            print(f"  {Colors.YELLOW}Error: {error_detail}{Colors.RESET}")

        time.sleep(self.delay)
        return response

    def _log_progress(self, label: str, current: int, total: int):
        percentage = (current / total) * 100
        bar_length = 40
        filled = int(bar_length * current / total)
        bar = '█' * filled + '░' * (bar_length - filled)
        print(f"\r{Colors.CYAN}{label}:{Colors.RESET} [{bar}] {current}/{total} ({percentage:.1f}%)", end='', flush=True)
        if current == total:
            print()  # New line when complete

    def _record(self, entity_name: str, data: Dict[str, Any], record_id: Optional[str] = None) -> Dict[str, Any]:
        record = {
            "entity_name": entity_name,
            "record_id": record_id or new_id(),
            "data": data,
            "local_updated_at": now_iso(),
            "is_deleted": False
        }
        self.records[entity_name].append(record)
        return record

    # ===========================
    # Record generation
    # ===========================

    def generate_catalog(self, product_count: int):
        print(f"\n{Colors.BOLD}Step 1: Generating catalog{Colors.RESET}")

        categories = [
            self._record("productCategories", {"nameAr": name, "nameEn": name_en, "color": color})
            for name, name_en, color in CATEGORIES
        ]
        warehouse = self._record("warehouses", {"name": "المخزن الرئيسي", "location": fake.city(), "isDefault": True})
        unit = self._record("units", {"name": "قطعة", "symbol": "pc"})

        for index in range(product_count):
            cost = round(random.uniform(2, 150), 2)
            product = self._record("products", {
                "nameAr": f"{random.choice(PRODUCT_NAMES)} {index + 1}",
                "barcode": fake.ean13(),
                "category": random.choice(categories)["record_id"],
                "unit": "pc",
                "cost": cost,
                "price": round(cost * random.uniform(1.1, 1.6), 2),
                "stock": random.randint(0, 200),
                "minStock": 5,
                "active": True,
                "createdAt": now_iso()
            })
            self._record("productUnits", {
                "productId": product["record_id"],
                "unitId": unit["record_id"],
                "conversionFactor": 1
            })
            self._record("productStock", {
                "productId": product["record_id"],
                "warehouseId": warehouse["record_id"],
                "quantity": product["data"]["stock"]
            })

        for name, method_type in PAYMENT_METHODS:
            self._record("paymentMethods", {"name": name, "type": method_type})

        self._record("settings", {"key": "currency", "value": "EGP"}, record_id="currency")
        self._record("settings", {"key": "receipt_footer", "value": "شكراً لزيارتكم"}, record_id="receipt_footer")

        print(f"{Colors.GREEN}✓{Colors.RESET} {sum(len(v) for v in self.records.values())} catalog records generated")

    def generate_customers(self, count: int):
        print(f"\n{Colors.BOLD}Step 2: Generating customers and suppliers{Colors.RESET}")

        for _ in range(count):
            self._record("customers", {
                "name": fake.name(),
                "phone": fake.phone_number(),
                "address": fake.address().replace("\n", ", "),
                "creditLimit": random.choice([0, 500, 1000, 2500]),
                "currentBalance": 0
            })

        for _ in range(max(2, count // 5)):
            self._record("suppliers", {
                "name": fake.company(),
                "phone": fake.phone_number(),
                "taxNumber": fake.numerify("###-###-###")
            })

        self._record("employees", {
            "name": fake.name(),
            "position": "كاشير",
            "salary": 6000,
            "hireDate": fake.date_between(start_date="-3y").isoformat()
        })

        print(f"{Colors.GREEN}✓{Colors.RESET} {len(self.records['customers'])} customers generated")

    def generate_sales(self, invoice_count: int):
        print(f"\n{Colors.BOLD}Step 3: Generating shift and invoices{Colors.RESET}")

        opened_at = datetime.now(timezone.utc) - timedelta(hours=8)
        shift = self._record("shifts", {"userId": "seed-script", "startTime": opened_at.isoformat(), "startingCash": 500})
        products = self.records["products"]
        customers = self.records["customers"]
        payment_method = self.records["paymentMethods"][0]

        for index in range(invoice_count):
            invoice_id = new_id()
            lines = random.sample(products, k=min(len(products), random.randint(1, 4)))
            total = 0.0
            for product in lines:
                quantity = random.randint(1, 5)
                price = product["data"]["price"]
                total += quantity * price
                self._record("invoiceItems", {
                    "invoiceId": invoice_id,
                    "productId": product["record_id"],
                    "quantity": quantity,
                    "price": price,
                    "total": round(quantity * price, 2)
                })

            total = round(total, 2)
            customer = random.choice(customers) if customers and random.random() < 0.4 else None
            self._record("invoices", {
                "invoiceNumber": f"INV-{index + 1:05d}",
                "customerId": customer["record_id"] if customer else None,
                "shiftId": shift["record_id"],
                "total": total,
                "netTotal": total,
                "paidAmount": total,
                "paymentStatus": "paid",
                "invoiceDate": (opened_at + timedelta(minutes=5 * index)).isoformat()
            }, record_id=invoice_id)
            self._record("payments", {
                "invoiceId": invoice_id,
                "paymentMethodId": payment_method["record_id"],
                "amount": total,
                "paidAt": now_iso()
            })

        self._record("cashMovements", {"shiftId": shift["record_id"], "type": "out", "amount": 120, "reason": "مصاريف نظافة"})

        print(f"{Colors.GREEN}✓{Colors.RESET} {len(self.records['invoices'])} invoices generated")

    # ===========================
    # Sync round trips
    # ===========================

    def push_all(self):
        print(f"\n{Colors.BOLD}Step 4: Pushing batches{Colors.RESET}")

        pending = [record for records in self.records.values() for record in records]
        batch_size = settings.SYNC_MAX_BATCH_SIZE
        batches = [pending[i:i + batch_size] for i in range(0, len(pending), batch_size)]

        for index, batch in enumerate(batches, start=1):
            response = self._make_request("POST", "/sync/batch-push", json={
                "device_id": self.device_id,
                "records": batch
            })
            if response is None:
                continue
            if response.status_code != 200:
                for record in batch:
                    self.stats.record_failed(record["entity_name"], response.text[:200], response.status_code)
                continue

            self.stats.record_batch(batch, response.json())
            self._log_progress("Batches", index, len(batches))

    def push_stale_update(self):
        print(f"\n{Colors.BOLD}Step 5: Provoking a conflict{Colors.RESET}")

        customer = self.records["customers"][0]
        stale = dict(customer)
        stale["data"] = dict(customer["data"], name="نسخة قديمة")
        stale["local_updated_at"] = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()

        response = self._make_request("POST", "/sync/batch-push", json={
            "device_id": self.device_id,
            "records": [stale]
        })
        if response is None or response.status_code != 200:
            return

        data = response.json()
        self.stats.conflicts += len(data["conflicts"])
        self.stats.assert_true(
            [conflict["record_id"] for conflict in data["conflicts"]] == [customer["record_id"]],
            "stale customer update is reported as a conflict"
        )

        response = self._make_request("POST", "/sync/resolve-conflict", json={
            "entity_name": "customers",
            "record_id": customer["record_id"],
            "resolution": "accept_server"
        })
        self.stats.assert_true(
            response is not None and response.status_code == 200,
            "conflict resolved with accept_server"
        )

    def pull_all(self):
        print(f"\n{Colors.BOLD}Step 6: Pulling changes{Colors.RESET}")

        since = "2000-01-01T00:00:00Z"
        seen = set()
        pages = 0
        while True:
            response = self._make_request("POST", "/sync/pull", json={"since": since})
            if response is None or response.status_code != 200:
                return
            data = response.json()
            pages += 1
            for change in data["changes"]:
                key = (change["entity_name"], change["record_id"])
                self.stats.assert_true(key not in seen, f"change {key} pulled only once")
                seen.add(key)
            if not data["has_more"]:
                break
            since = data["next_cursor"]

        self.stats.pulled = len(seen)
        print(f"{Colors.GREEN}✓{Colors.RESET} {len(seen)} changes pulled in {pages} pages")

        synced_total = sum(self.stats.synced.values())
        self.stats.assert_true(
            len(seen) >= synced_total,
            f"pulled {len(seen)} changes, expected at least {synced_total}"
        )

    def check_stats(self):
        print(f"\n{Colors.BOLD}Step 7: Checking diagnostics{Colors.RESET}")

        response = self._make_request("GET", "/sync/stats")
        if response is None or response.status_code != 200:
            return

        data = response.json()
        counts = {table["entity_name"]: table["record_count"] for table in data["tables_stats"]}
        print(f"{Colors.GREEN}✓{Colors.RESET} pending notifications: {data['pending_queue_count']}")
        self.stats.assert_true(
            counts.get("invoices", 0) >= len(self.records["invoices"]),
            "every pushed invoice is counted"
        )

    def run(self, test_mode: bool = False):
        """Execute the complete seeding process.

        Args:
            test_mode: If True, use minimal counts for quick testing
        """
        if test_mode:
            print(f"{Colors.YELLOW}Running in TEST MODE with minimal data{Colors.RESET}\n")
            product_count, customer_count, invoice_count = 5, 3, 5
        else:
            product_count, customer_count, invoice_count = 60, 40, 150

        try:
            self.generate_catalog(product_count)
            self.generate_customers(customer_count)
            self.generate_sales(invoice_count)
            self.push_all()
            if not self.dry_run:
                self.push_stale_update()
                self.pull_all()
                self.check_stats()

            return self.stats.print_summary()

        except KeyboardInterrupt:
            print(f"\n\n{Colors.YELLOW}Seeding interrupted by user{Colors.RESET}")
            return 1
        finally:
            self.client.close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the POS sync backend with mock till data"
    )
    parser.add_argument(
        "--api-url",
        default=os.getenv("API_URL", "http://localhost:8000"),
        help="Base URL for the API (default: http://localhost:8000)"
    )
    parser.add_argument("--client-id", default=os.getenv("SEED_CLIENT_ID", "1"), help="Tenant client id")
    parser.add_argument("--branch-id", default=os.getenv("SEED_BRANCH_ID", "1"), help="Tenant branch id")
    parser.add_argument("--device-id", default="seed-till", help="Device id reported with pushes")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Generate records without pushing them"
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=0.1,
        help="Delay in seconds between requests (default: 0.1)"
    )
    parser.add_argument(
        "--test",
        action="store_true",
        help="Run with minimal data for quick testing"
    )

    args = parser.parse_args()

    simulator = TillSimulator(
        api_url=args.api_url,
        client_id=args.client_id,
        branch_id=args.branch_id,
        device_id=args.device_id,
        dry_run=args.dry_run,
        delay=args.delay
    )
    exit_code = simulator.run(test_mode=args.test)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
