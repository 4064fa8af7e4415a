import pytest

from core.qr.payload_classifier import classifyPayload, isLinkEligible


@pytest.mark.parametrize("text,expected", [
    ("https://example.com", "url"),
    ("HTTP://EXAMPLE.COM/path?q=1", "url"),
    ("www.example.com", "url"),
    ("mailto:someone@example.com", "email"),
    ("someone@example.com", "email"),
    ("tel:+15551234567", "phone"),
    ("SMSTO:+15551234567:hello", "sms"),
    ("WIFI:T:WPA;S:home;P:secret;;", "wifi"),
    ("geo:48.8584,2.2945", "geo"),
    ("BEGIN:VCARD\nVERSION:3.0\nFN:Jane\nEND:VCARD", "contact"),
    ("MECARD:N:Doe,Jane;;", "contact"),
    ("just some words", "text"),
    ("https://example.com has spaces", "text"),
    ("", "text"),
])
def test_classify_payload(text, expected):
    assert classifyPayload(text) == expected


def test_link_eligibility():
    assert isLinkEligible("url")
    assert isLinkEligible("email")
    assert not isLinkEligible("wifi")
    assert not isLinkEligible("text")
