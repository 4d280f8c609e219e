from __future__ import annotations


# Format identification
UT_TYPE = "com.apple.finder.textclipping"
FILE_EXTENSION = "textClipping"

# Top-level wrapper key; its value holds the identifier-keyed representations
UTI_DATA_KEY = "UTI-Data"

# Content-type identifiers (wire contract, case-sensitive)
UTI_UTF8_PLAIN_TEXT = "public.utf8-plain-text"
UTI_UTF16_PLAIN_TEXT = "public.utf16-plain-text"
UTI_RTF = "public.rtf"
UTI_FLAT_RTFD = "com.apple.flat-rtfd"
UTI_HTML = "public.html"
UTI_WEBARCHIVE = "com.apple.webarchive"

# Slot names on TextClipping, in identifier table order
SLOT_UTF8 = "plain_text_utf8"
SLOT_UTF16 = "plain_text_utf16"
SLOT_RTF = "rich_text_markup"
SLOT_RTFD = "rich_text_with_media"
SLOT_HTML = "html_markup"
SLOT_WEBARCHIVE = "archived_page"

# On-disk value kinds
KIND_STRING = "string"
KIND_DATA = "data"

# Classic Mac OS file type / creator written by the Finder for clippings
HFS_TYPE_CODE = b"clpt"
HFS_CREATOR_CODE = b"MACS"
FINDER_INFO_XATTR = "com.apple.FinderInfo"
FINDER_INFO_SIZE = 32

# Property list output formats accepted by the writer
PLIST_FORMAT_BINARY = "binary"
PLIST_FORMAT_XML = "xml"
DEFAULT_PLIST_FORMAT = PLIST_FORMAT_BINARY

# Reader safety limit; clippings are small, anything larger is refused
DEFAULT_MAX_CLIPPING_SIZE = 64 * 1024 * 1024  # 64 MiB

# Attachment character used in the plain-text projection of rich text
ATTACHMENT_CHAR = "\ufffc"
