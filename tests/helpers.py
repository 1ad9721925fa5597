"""Bogus project credentials and session ids minted for them."""
from __future__ import annotations

API_KEY = "12345678"
API_SECRET = "0123456789abcdef0123456789abcdef0123456789"

# Issued by the platform for API_KEY; decodes to "1~12345678~" plus a timestamp record.
SESSION_ID = "1_MX4xMjM0NTY3OH4-VGh1IEZlYiAyNyAwNDozODozMSBQU1QgMjAxNH4wLjI0NDgyMjI"

# Version 2 session id for project 854511, with a trailing empty segment.
OTHER_SESSION_ID = "2_MX44NTQ1MTF-flR1ZSBOb3YgMTIgMDk6NDA6NTkgUFNUIDIwMTN-MC43NjU0Nzh-"
