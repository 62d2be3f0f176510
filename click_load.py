"""
click_load.py — simple async load script for the click-tracking endpoint

Usage:
  python click_load.py --base http://127.0.0.1:8000 --pages 50 --count 5000 --concurrency 100
"""
import argparse
import asyncio
import random
import string
import time
from datetime import datetime, timezone

import httpx

def _now_iso():
    return datetime.now(timezone.utc).isoformat()

def _rand_link():
    hosts = ["open.spotify.com", "music.apple.com", "bandcamp.com", "youtube.com", "soundcloud.com"]
    alphabet = string.ascii_lowercase + string.digits
    return f"https://{random.choice(hosts)}/" + "".join(random.choice(alphabet) for _ in range(6))

async def _click_one(client: httpx.AsyncClient, base: str, page_id: int, link_url: str):
    payload = {"link_page_id": page_id, "link_url": link_url}
    headers = {"User-Agent": "click-load/1.0", "Referer": f"https://extrch.example/{page_id}"}
    try:
        r = await client.post(f"{base}/link-page/click", json=payload, headers=headers, timeout=10)
        r.raise_for_status()
        return True
    except Exception:
        return False

async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8000")
    parser.add_argument("--pages", type=int, default=50)
    parser.add_argument("--start-id", type=int, default=1000)
    parser.add_argument("--links-per-page", type=int, default=5)
    parser.add_argument("--count", type=int, default=5000)
    parser.add_argument("--concurrency", type=int, default=100)
    args = parser.parse_args()

    links = {
        args.start_id + i: [_rand_link() for _ in range(args.links_per_page)]
        for i in range(args.pages)
    }
    page_ids = list(links)

    start_iso = _now_iso()
    t0 = time.perf_counter()
    success = 0

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(limits=limit) as client:
        sem = asyncio.Semaphore(args.concurrency)

        async def _task(i):
            nonlocal success
            async with sem:
                page_id = random.choice(page_ids)
                ok = await _click_one(client, args.base, page_id, random.choice(links[page_id]))
                if ok:
                    success += 1

        await asyncio.gather(*(_task(i) for i in range(args.count)))

    dt = time.perf_counter() - t0
    end_iso = _now_iso()
    print(f"START: {start_iso}")
    print(f"END:   {end_iso}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   clicks={args.count}, ok={success}, fail={args.count - success}")
    if dt > 0:
        print(f"TPS:   {success/dt:.1f} req/s")

if __name__ == "__main__":
    asyncio.run(main())
