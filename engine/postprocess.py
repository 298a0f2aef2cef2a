"""
Post-processing applied to generated code before it is returned.

Replaces emoji with inline SVG icons (known emoji get a matching icon, any
other pictograph gets a neutral circle) and makes sure the stylesheet sizes
the `.icon` class.
"""

from typing import Dict

from engine.validator import EMOJI_PATTERN, GeneratedCode

_SVG_OPEN = '<svg class="icon" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">'
_SVG_FILLED = '<svg class="icon" viewBox="0 0 24 24" fill="currentColor">'

_STAR_PATH = '<path d="M12 2l3.09 6.26L22 9.27l-5 4.87 1.18 6.88L12 17.77l-6.18 3.25L7 14.14 2 9.27l6.91-1.01L12 2z"/>'
_HEART_PATH = ('<path d="M12 21.35l-1.45-1.32C5.4 15.36 2 12.28 2 8.5 2 5.42 4.42 3 7.5 3c1.74 0 3.41.81 '
               '4.5 2.09C13.09 3.81 14.76 3 16.5 3 19.58 3 22 5.42 22 8.5c0 3.78-3.4 6.86-8.55 11.54L12 21.35z"/>')
_CHECK = _SVG_OPEN + '<polyline points="20 6 9 17 4 12"/></svg>'

FALLBACK_ICON = _SVG_OPEN + '<circle cx="12" cy="12" r="10"/></svg>'

# Longer keys first: variation selectors (U+FE0F) are part of some emoji
EMOJI_TO_SVG: Dict[str, str] = {
    "❤️": _SVG_FILLED + _HEART_PATH + "</svg>",
    "👁️": _SVG_OPEN + '<path d="M1 12s4-8 11-8 11 8 11 8-4 8-11 8-11-8-11-8z"/><circle cx="12" cy="12" r="3"/></svg>',
    "⬆️": _SVG_OPEN + '<polyline points="18 15 12 9 6 15"/></svg>',
    "🛍️": _SVG_OPEN + '<path d="M6 2L3 6v14a2 2 0 0 0 2 2h14a2 2 0 0 0 2-2V6l-3-4z"/>'
                       '<line x1="3" y1="6" x2="21" y2="6"/><path d="M16 10a4 4 0 0 1-8 0"/></svg>',
    "🛒": _SVG_OPEN + '<circle cx="9" cy="21" r="1"/><circle cx="20" cy="21" r="1"/>'
                      '<path d="M1 1h4l2.68 13.39a2 2 0 0 0 2 1.61h9.72a2 2 0 0 0 2-1.61L23 6H6"/></svg>',
    "⭐": _SVG_FILLED + _STAR_PATH + "</svg>",
    "★": _SVG_FILLED + _STAR_PATH + "</svg>",
    "☆": _SVG_OPEN + _STAR_PATH + "</svg>",
    "🤍": _SVG_OPEN + _HEART_PATH + "</svg>",
    "📱": _SVG_OPEN + '<rect x="5" y="2" width="14" height="20" rx="2" ry="2"/><line x1="12" y1="18" x2="12.01" y2="18"/></svg>',
    "💻": _SVG_OPEN + '<rect x="2" y="3" width="20" height="14" rx="2" ry="2"/><line x1="2" y1="20" x2="22" y2="20"/></svg>',
    "🔍": _SVG_OPEN + '<circle cx="11" cy="11" r="8"/><path d="m21 21-4.35-4.35"/></svg>',
    "📧": _SVG_OPEN + '<rect x="2" y="4" width="20" height="16" rx="2"/><path d="m22 6-10 7L2 6"/></svg>',
    "📞": _SVG_OPEN + '<path d="M22 16.92v3a2 2 0 0 1-2.18 2 19.79 19.79 0 0 1-8.63-3.07 19.5 19.5 0 0 1-6-6 '
                      '19.79 19.79 0 0 1-3.07-8.67A2 2 0 0 1 4.11 2h3a2 2 0 0 1 2 1.72c.13.96.36 1.9.7 2.81a2 2 0 0 1-.45 '
                      '2.11L8.09 9.91a16 16 0 0 0 6 6l1.27-1.27a2 2 0 0 1 2.11-.45c.91.34 1.85.57 2.81.7A2 2 0 0 1 22 16.92z"/></svg>',
    "🚚": _SVG_OPEN + '<rect x="1" y="3" width="15" height="13"/><polygon points="16 8 20 8 23 11 23 16 16 16 16 8"/>'
                      '<circle cx="5.5" cy="18.5" r="2.5"/><circle cx="18.5" cy="18.5" r="2.5"/></svg>',
    "💳": _SVG_OPEN + '<rect x="1" y="4" width="22" height="16" rx="2" ry="2"/><line x1="1" y1="10" x2="23" y2="10"/></svg>',
    "🔄": _SVG_OPEN + '<path d="M23 4v6h-6"/><path d="M1 20v-6h6"/>'
                      '<path d="M3.51 9a9 9 0 0 1 14.85-3.36L23 10M1 14l4.64 4.36A9 9 0 0 0 20.49 15"/></svg>',
    "💡": _SVG_OPEN + '<line x1="9" y1="18" x2="15" y2="18"/><line x1="10" y1="22" x2="14" y2="22"/>'
                      '<path d="M15.09 14c.18-.98.65-1.74 1.41-2.5A4.65 4.65 0 0 0 18 8 6 6 0 0 0 6 8c0 1 .23 2.23 '
                      '1.5 3.5A4.61 4.61 0 0 1 8.91 14"/></svg>',
    "🏠": _SVG_OPEN + '<path d="m3 9 9-7 9 7v11a2 2 0 0 1-2 2H5a2 2 0 0 1-2-2z"/><polyline points="9 22 9 12 15 12 15 22"/></svg>',
    "👤": _SVG_OPEN + '<path d="M20 21v-2a4 4 0 0 0-4-4H8a4 4 0 0 0-4 4v2"/><circle cx="12" cy="7" r="4"/></svg>',
    "📚": _SVG_OPEN + '<path d="M4 19.5A2.5 2.5 0 0 1 6.5 17H20"/>'
                      '<path d="M6.5 2H20v20H6.5A2.5 2.5 0 0 1 4 19.5v-15A2.5 2.5 0 0 1 6.5 2z"/></svg>',
    "📷": _SVG_OPEN + '<rect x="3" y="3" width="18" height="18" rx="2" ry="2"/><circle cx="12" cy="12" r="4"/></svg>',
    "✓": _CHECK,
    "✔": _CHECK,
    "✗": _SVG_OPEN + '<line x1="18" y1="6" x2="6" y2="18"/><line x1="6" y1="6" x2="18" y2="18"/></svg>',
    "➜": _SVG_OPEN + '<line x1="5" y1="12" x2="19" y2="12"/><polyline points="12 5 19 12 12 19"/></svg>',
}

ICON_STYLES = """
.icon { width: 1.25em; height: 1.25em; display: inline-block; vertical-align: middle; }
.icon-sm { width: 1em; height: 1em; }
.icon-lg { width: 1.5em; height: 1.5em; }
.icon-xl { width: 2em; height: 2em; }
"""


def replace_emojis_with_svg(html: str) -> str:
    """Swap known emoji for matching SVG icons and any remaining pictograph for a neutral one."""
    result = html
    for emoji, svg in EMOJI_TO_SVG.items():
        result = result.replace(emoji, svg)
    # Orphaned variation selectors left behind by emoji outside the map
    result = EMOJI_PATTERN.sub(FALLBACK_ICON, result).replace("\ufe0f", "")
    return result


def add_icon_styles(css: str) -> str:
    if ".icon" in css:
        return css
    return css + ICON_STYLES


def post_process_code(code: GeneratedCode) -> GeneratedCode:
    return GeneratedCode(
        html=replace_emojis_with_svg(code.html),
        css=add_icon_styles(code.css),
        js=code.js,
    )
