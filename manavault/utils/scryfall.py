"""
Scryfall API wrapper: pure HTTP layer, no database interaction.

One ScryfallClient is bound to the app in create_app() and reached through
get_scryfall(). Every request passes through the client's RequestThrottle,
and HTTP 429 responses are retried with the Retry-After delay Scryfall
sends. Everything else that goes wrong (network error, timeout, non-2xx,
non-JSON body) raises ScryfallError so callers can degrade gracefully.

Scryfall API reference: https://scryfall.com/docs/api
"""
import logging
import time

import requests
from flask import current_app

from manavault.utils.throttle import RequestThrottle

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.scryfall.com"


class ScryfallError(Exception):
    """Raised when Scryfall returns an error or the network fails."""
    def __init__(self, message: str, status_code: int = None, not_found: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.not_found = not_found


class ScryfallClient:
    """Rate-limited Scryfall client.

    Args:
        base_url:    API root, overridable for tests or a local mirror.
        session:     requests.Session to reuse (a fresh one by default).
        throttle:    RequestThrottle shared by every call this client makes.
        timeout:     Per-request timeout in seconds.
        max_retries: Attempts made when Scryfall answers 429.
        sleep:       Sleep function used between 429 retries.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: requests.Session = None,
        throttle: RequestThrottle = None,
        timeout: float = 10,
        max_retries: int = 3,
        sleep=time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept":     "application/json;q=0.9,*/*;q=0.8",
            "User-Agent": "ManaVault/1.0",
        })
        self.throttle = throttle or RequestThrottle()
        self.timeout = timeout
        self.max_retries = max(1, int(max_retries))
        self._sleep = sleep

    @classmethod
    def from_config(cls, cfg) -> "ScryfallClient":
        return cls(
            base_url=cfg.get("SCRYFALL_BASE_URL", DEFAULT_BASE_URL),
            throttle=RequestThrottle(cfg.get("SCRYFALL_MIN_INTERVAL", 0.1)),
            timeout=cfg.get("SCRYFALL_TIMEOUT", 10),
            max_retries=cfg.get("SCRYFALL_MAX_RETRIES", 3),
        )

    def init_app(self, app) -> None:
        app.extensions["scryfall"] = self

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _get(self, path: str, params: dict = None) -> dict:
        """Make a throttled GET request and return parsed JSON."""
        url = f"{self.base_url}{path}"

        for attempt in range(1, self.max_retries + 1):
            self.throttle.wait()
            try:
                resp = self.session.get(url, params=params, timeout=self.timeout)
            except requests.RequestException as exc:
                raise ScryfallError(f"Network error contacting Scryfall: {exc}") from exc

            if resp.status_code != 429:
                break

            if attempt == self.max_retries:
                raise ScryfallError(
                    f"Scryfall rate limit hit after {self.max_retries} attempts",
                    status_code=429,
                )
            wait = _retry_after(resp.headers.get("Retry-After"), default=attempt)
            log.warning("Scryfall rate limited (429), waiting %.1fs before retry %d/%d",
                        wait, attempt, self.max_retries)
            self._sleep(wait)

        if resp.status_code == 404:
            raise ScryfallError("Card not found", status_code=404, not_found=True)
        if not resp.ok:
            raise ScryfallError(
                f"Scryfall returned {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise ScryfallError("Scryfall returned a malformed body",
                                status_code=resp.status_code) from exc
        if not isinstance(data, dict):
            raise ScryfallError("Scryfall returned an unexpected payload",
                                status_code=resp.status_code)
        return data

    # ── Public API ────────────────────────────────────────────────────────────

    def get_card_by_id(self, scryfall_id: str) -> dict:
        """
        Fetch a specific card printing by its Scryfall UUID.

        Returns:
            Raw Scryfall card object.

        Raises:
            ScryfallError: Not found or API error.
        """
        return self._get(f"/cards/{scryfall_id}")

    def search_page(self, query: str, **params) -> dict:
        """
        One page of a Scryfall search, e.g. 'c:red t:creature cmc<=2'.

        Extra keyword arguments are passed through (unique, order, dir, page…).
        Returns the raw list object; a query with no matches yields an empty
        page instead of raising.
        """
        try:
            return self._get("/cards/search", params={"q": query, **params})
        except ScryfallError as exc:
            if exc.not_found:
                return {"data": [], "total_cards": 0, "has_more": False}
            raise

    def search_cards(self, query: str, **params) -> list[dict]:
        """Card objects from the first page of search_page()."""
        return self.search_page(query, **params).get("data", [])

    def autocomplete(self, query: str) -> list[str]:
        """Up to 20 card names starting with (or close to) *query*."""
        data = self._get("/cards/autocomplete", params={"q": query})
        return data.get("data", [])

    def find_english_printing(self, oracle_id: str) -> dict | None:
        """Return the newest English printing sharing this oracle_id, or None."""
        printings = self.search_cards(
            f"oracleid:{oracle_id} lang:en",
            unique="prints",
            order="released",
            dir="desc",
        )
        return printings[0] if printings else None


def get_scryfall() -> ScryfallClient:
    """Return the ScryfallClient bound to the current app."""
    return current_app.extensions["scryfall"]


def _retry_after(header: str | None, default: float) -> float:
    try:
        return max(0.0, float(header)) if header else float(default)
    except ValueError:
        return float(default)


def _image_uris(data: dict) -> dict:
    """Extract image URIs, handling double-faced cards (image_uris lives in card_faces)."""
    uris = data.get("image_uris")
    if not uris and data.get("card_faces"):
        uris = data["card_faces"][0].get("image_uris", {})
    return uris or {}


def normalize_card(data: dict) -> dict:
    """
    Convert a raw Scryfall card object into a flat dict matching our Card model.
    Safe to call with any valid Scryfall card object (single-faced or DFC).
    """
    uris = _image_uris(data)
    return {
        "scryfall_id":      data["id"],
        "oracle_id":        data.get("oracle_id"),
        "name":             data.get("printed_name") or data["name"],
        "lang":             data.get("lang", "en"),
        "set_code":         data.get("set", "").upper(),
        "set_name":         data.get("set_name", ""),
        "collector_number": data.get("collector_number", ""),
        "rarity":           data.get("rarity", ""),
        "type_line":        data.get("type_line", ""),
        "mana_cost":        data.get("mana_cost", ""),
        "image_normal":     uris.get("normal"),
    }
