"""Manual script to verify a running code-generation API responds as expected."""

from __future__ import annotations

import requests
from config.settings import load_config

config = load_config()  # reads .env into os.environ

BASE_URL = config.api_base_url
TIMEOUT = config.request_timeout

try:
    resp = requests.get(f"{BASE_URL}/api/history", params={"page": 1}, timeout=TIMEOUT)
    print("History status:", resp.status_code)
    if resp.ok:
        data = resp.json()
        print("Items on page 1:", len(data))
        for item in data[:5]:
            print("-", item.get("id"), item.get("language", {}).get("name"), item.get("prompt", "")[:60])
    else:
        print(resp.text[:500])

    payload = {"prompt": "write a function to reverse a string", "language": "python"}
    gen = requests.post(f"{BASE_URL}/api/generate", json=payload, timeout=TIMEOUT)
    print("Generate status:", gen.status_code)
    if gen.ok:
        data = gen.json()
        print("Generation id:", data.get("id"))
        print(data.get("code"))

        star = requests.patch(
            f"{BASE_URL}/api/generation/{data.get('id')}/star",
            json={"starred": not data.get("starred", False)},
            timeout=TIMEOUT,
        )
        print("Star status:", star.status_code, star.json().get("starred") if star.ok else star.text[:200])
    else:
        print(gen.text[:500])
except Exception as exc:  # noqa: BLE001
    print("[error]", exc)
    raise
