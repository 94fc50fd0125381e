"""
Voice Call Simulation Script

Drives scripted voice-agent calls against a running server:
add items, modify, summarize, upsell, remove and check out.

Run from project root:
    python scripts/simulate_call.py                  # one scripted call
    python scripts/simulate_call.py --callers 20     # 20 concurrent calls
    python scripts/simulate_call.py --shared 25      # 25 writers on one cart

`--shared` fires concurrent add-item requests at a single call id and then
checks that no quantity was lost.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
import uuid
from datetime import datetime
from typing import Any

import httpx

# Configuration
API_BASE_URL = "http://localhost:8001"
RESTAURANT_PHONE = "+17039120079"

SPICE_LEVELS = ["Original", "Mild", "Medium", "Hot", "Extra Hot"]
SIDES = ["Fries", "Cheese Fries", "Mac & Cheese", "Slaw", "Toffee Cake"]
SODA_FLAVOURS = ["Coke", "Sprite", "Lemonade"]


def new_call() -> dict[str, str]:
    return {
        "call_id": f"call_sim_{uuid.uuid4().hex[:12]}",
        "to_number": RESTAURANT_PHONE,
        "from_number": f"+1555{random.randint(1000000, 9999999)}",
    }


async def call_function(
    client: httpx.AsyncClient,
    path: str,
    call: dict[str, str],
    args: dict[str, Any],
) -> dict[str, Any]:
    """POST one agent function and return its `result` block."""
    response = await client.post(
        f"{API_BASE_URL}{path}",
        json={"call": call, "args": args},
        timeout=30.0,
    )
    result = response.json().get("result", {})
    result["status_code"] = response.status_code
    return result


# =============================================================================
# SCRIPTED CALL
# =============================================================================

async def scripted_call(client: httpx.AsyncClient, caller_num: int, verbose: bool) -> dict[str, Any]:
    """One caller orders a sandwich, a side and a soda, changes their mind, pays."""
    call = new_call()
    start_time = time.time()
    steps: list[tuple[str, dict[str, Any]]] = []

    def log(step: str, result: dict[str, Any]) -> None:
        steps.append((step, result))
        if verbose:
            flag = "✅" if result.get("success") else "❌"
            print(f"   {flag} {step}: {result.get('message')}")

    try:
        log("add sandwich", await call_function(client, "/cart/add-item", call, {
            "itemName": "Spicy Sandwich (2pc)",
            "quantity": 1,
            "firstItemSpiceLevel": random.choice(SPICE_LEVELS),
            "secondItemSpiceLevel": random.choice(SPICE_LEVELS),
        }))
        log("add cheese", await call_function(client, "/cart/add-modifiers", call, {
            "itemName": "Spicy Sandwich (2pc)",
            "firstSandwichMods": ["Add cheese 1"],
            "secondSandwichMods": ["No Pickles 2"],
        }))
        log("add side", await call_function(client, "/cart/add-item", call, {
            "itemName": random.choice(SIDES),
            "quantity": random.randint(1, 2),
        }))
        log("add soda", await call_function(client, "/cart/add-item", call, {
            "itemName": "SODA",
            "specialInstructions": random.choice(SODA_FLAVOURS),
        }))
        log("upsell", await call_function(client, "/cart/upsell", call, {}))
        log("remove soda", await call_function(client, "/cart/remove-item", call, {
            "itemName": "SODA",
        }))
        summary = await call_function(client, "/cart/summary", call, {})
        log("summary", summary)
        log("checkout", await call_function(client, "/checkout/payment-link", call, {
            "customerName": f"Caller {caller_num}",
        }))
    except httpx.HTTPError as e:
        return {
            "caller_num": caller_num,
            "success": False,
            "error": str(e),
            "time": round(time.time() - start_time, 3),
        }

    failed_steps = [name for name, result in steps if not result.get("success")]
    return {
        "caller_num": caller_num,
        "call_id": call["call_id"],
        "success": not failed_steps,
        "error": ", ".join(failed_steps) if failed_steps else None,
        "subtotal": summary.get("subtotal", 0),
        "time": round(time.time() - start_time, 3),
    }


async def run_callers(num_callers: int) -> bool:
    print("=" * 70)
    print(f"📞 SIMULATING {num_callers} CONCURRENT CALL(S)")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()
    async with httpx.AsyncClient() as client:
        results = await asyncio.gather(
            *(scripted_call(client, i + 1, verbose=num_callers == 1) for i in range(num_callers))
        )
    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print(f"\n✅ Successful calls: {len(successful)}/{num_callers}")
    print(f"❌ Failed calls: {len(failed)}/{num_callers}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"   Average call: {avg_time}s")
        print(f"   Total basket value: ${sum(r['subtotal'] for r in successful):.2f}")

    for f in failed[:5]:
        print(f"   Caller #{f['caller_num']}: {f.get('error', 'Unknown error')}")

    return not failed


# =============================================================================
# SHARED CART (optimistic concurrency)
# =============================================================================

async def run_shared_cart(num_writers: int) -> bool:
    print("=" * 70)
    print(f"🔀 {num_writers} CONCURRENT WRITERS ON ONE CART")
    print("=" * 70)

    call = new_call()
    async with httpx.AsyncClient() as client:
        results = await asyncio.gather(
            *(
                call_function(client, "/cart/add-item", call, {"itemName": "Fries", "quantity": 1})
                for _ in range(num_writers)
            )
        )
        summary = await call_function(client, "/cart/summary", call, {})

    accepted = sum(1 for r in results if r.get("success"))
    conflicts = [r for r in results if r.get("status_code") == 500]

    print(f"\n   Accepted writes: {accepted}/{num_writers}")
    print(f"   Gave up after retries: {len(conflicts)}")
    print(f"   Items in cart: {summary.get('itemCount')}")

    if summary.get("itemCount") != accepted:
        print("\n❌ Cart quantity does not match accepted writes")
        return False

    print("\n✅ No writes lost")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Voice Call Simulation Script")
    parser.add_argument("--callers", type=int, default=1, help="Number of concurrent calls")
    parser.add_argument("--shared", type=int, default=0, help="Concurrent writers on one cart")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url.rstrip("/")

    if args.shared:
        ok = asyncio.run(run_shared_cart(args.shared))
    else:
        ok = asyncio.run(run_callers(args.callers))

    sys.exit(0 if ok else 1)
