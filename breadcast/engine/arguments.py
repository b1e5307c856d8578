"""
Parsing of raw frame request parameters.

Every function here is total: unrecognised or out-of-range input falls back
to a default or is clamped, never raised.
"""
import re
from typing import Optional

from breadcast.models.schemas import MAX_SCALE, MIN_SCALE, FrameArguments, FrameScreen

# CIDv0 (base58btc sha2-256 multihash) and CIDv1 (multibase base32, lowercase)
_CID_V0 = re.compile(r"^Qm[1-9A-HJ-NP-Za-km-z]{44}$")
_CID_V1 = re.compile(r"^b[a-z2-7]{58,}$")


def is_valid_cid(value: Optional[str]) -> bool:
    """Return True if `value` looks like an IPFS content identifier."""
    if not value:
        return False
    return bool(_CID_V0.match(value) or _CID_V1.match(value))


def parse_screen(value: Optional[str], fallback: FrameScreen = FrameScreen.TITLE) -> FrameScreen:
    for screen in FrameScreen:
        if value == screen.value:
            return screen
    return fallback


def parse_int(value: Optional[str], default: int) -> int:
    """Parse a leading integer the way query strings are usually written ("2", "3px" -> 3)."""
    if value is None:
        return default
    match = re.match(r"^\s*([+-]?\d+)", str(value))
    if not match:
        return default
    return int(match.group(1))


def parse_frame_arguments(
    recipe_id: str,
    scale: Optional[str] = None,
    screen: Optional[str] = None,
    page: Optional[str] = None,
) -> FrameArguments:
    """
    Build FrameArguments from raw request values.

    Scale is clamped into [MIN_SCALE, MAX_SCALE] and page to >= 1; the
    page's upper bound depends on the recipe and is applied by the navigator.
    """
    parsed_scale = max(MIN_SCALE, min(MAX_SCALE, parse_int(scale, MIN_SCALE)))
    parsed_page = max(1, parse_int(page, 1))
    return FrameArguments(
        recipe_id=recipe_id,
        screen=parse_screen(screen),
        scale=parsed_scale,
        page=parsed_page,
    )
