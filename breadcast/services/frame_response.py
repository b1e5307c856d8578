"""
Frame response assembly.

Builds the HTML document whose <head> carries the Farcaster frame metadata.
"""
import html
from typing import List, Optional, Sequence

from breadcast.engine.navigation import FrameButton, frame_url

FRAME_VERSION = "vNext"


def _meta(prop: str, content: str) -> str:
    return f'<meta property="{html.escape(prop)}" content="{html.escape(content)}" />'


def button_meta(number: int, label: str, target_url: Optional[str] = None) -> List[str]:
    """Metadata tags for one button; action and target only when it navigates."""
    tags = [_meta(f"fc:frame:button:{number}", label)]
    if target_url:
        tags.append(_meta(f"fc:frame:button:{number}:action", "post"))
        tags.append(_meta(f"fc:frame:button:{number}:target", target_url))
    return tags


def _document(head: List[str]) -> str:
    lines = "\n    ".join(head)
    return (
        '<html lang="en">\n'
        "  <head>\n"
        f"    {lines}\n"
        "  </head>\n"
        "  <body />\n"
        "</html>\n"
    )


def render_frame_html(
    image: str,
    post_url: str,
    buttons: Sequence[FrameButton],
    host: str,
) -> str:
    """
    Assemble a navigable frame.

    Args:
        image: Image URL or data URI.
        post_url: The request URL, echoed as the frame's post-back URL.
        buttons: Buttons in protocol order (numbered from 1).
        host: Hostname used for button target URLs.

    Returns:
        The HTML document.
    """
    head = [
        _meta("og:image", image),
        _meta("fc:frame", FRAME_VERSION),
        _meta("fc:frame:post_url", post_url),
        _meta("fc:frame:image", image),
    ]
    for number, button in enumerate(buttons, start=1):
        target = frame_url(host, button.target) if button.target is not None else None
        head.extend(button_meta(number, button.label, target))
    return _document(head)


def render_error_frame_html(image: str) -> str:
    """Assemble a degraded frame: image and protocol marker only."""
    return _document([
        _meta("og:image", image),
        _meta("fc:frame", FRAME_VERSION),
        _meta("fc:frame:image", image),
    ])
