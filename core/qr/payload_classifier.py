"""
Payload Classifier Module.

Classifies decoded QR payloads so the caller knows what kind of content
it got (and whether it may be opened as a link).

Recognized types follow the common QR content conventions:
    url      http(s)://...
    email    mailto:... or bare address
    phone    tel:...
    sms      sms: / smsto:
    wifi     WIFI:T:WPA;S:...;;
    geo      geo:lat,lon
    contact  BEGIN:VCARD / MECARD:
    text     anything else
"""

import re


CODE_TYPE_URL = "url"
CODE_TYPE_EMAIL = "email"
CODE_TYPE_PHONE = "phone"
CODE_TYPE_SMS = "sms"
CODE_TYPE_WIFI = "wifi"
CODE_TYPE_GEO = "geo"
CODE_TYPE_CONTACT = "contact"
CODE_TYPE_TEXT = "text"

LINK_TYPES = frozenset({CODE_TYPE_URL, CODE_TYPE_EMAIL, CODE_TYPE_PHONE, CODE_TYPE_SMS})

URL_PATTERN = re.compile(r'^(https?://|www\.)\S+$', re.IGNORECASE)
EMAIL_PATTERN = re.compile(r'^[\w.+-]+@[\w-]+(\.[\w-]+)+$')
GEO_PATTERN = re.compile(r'^geo:-?\d+(\.\d+)?,-?\d+(\.\d+)?', re.IGNORECASE)

_PREFIXES = [
    ("mailto:", CODE_TYPE_EMAIL),
    ("tel:", CODE_TYPE_PHONE),
    ("smsto:", CODE_TYPE_SMS),
    ("sms:", CODE_TYPE_SMS),
    ("wifi:", CODE_TYPE_WIFI),
    ("begin:vcard", CODE_TYPE_CONTACT),
    ("mecard:", CODE_TYPE_CONTACT),
]


def classifyPayload(text: str) -> str:
    """
    Classify a decoded payload.

    Args:
        text: Decoded QR content.

    Returns:
        One of the CODE_TYPE_* tags.
    """
    if not text:
        return CODE_TYPE_TEXT

    content = text.strip()
    lowered = content.lower()

    if URL_PATTERN.match(content):
        return CODE_TYPE_URL

    for prefix, codeType in _PREFIXES:
        if lowered.startswith(prefix):
            return codeType

    if GEO_PATTERN.match(content):
        return CODE_TYPE_GEO

    if EMAIL_PATTERN.match(content):
        return CODE_TYPE_EMAIL

    return CODE_TYPE_TEXT


def isLinkEligible(codeType: str) -> bool:
    """Check if a classified payload can be opened as a link."""
    return codeType in LINK_TYPES
