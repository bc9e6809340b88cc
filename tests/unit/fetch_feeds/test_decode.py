"""Tests for fetch_feeds.decode module."""

from fetch_feeds.decode import decode_body, detect_encoding


class TestDetectEncoding:
    def test_xml_declaration_wins(self) -> None:
        content = b'<?xml version="1.0" encoding="windows-1252"?><rss/>'
        assert detect_encoding(content, "text/xml; charset=utf-8") == "windows-1252"

    def test_content_type_charset(self) -> None:
        assert detect_encoding(b"<rss/>", "application/rss+xml; charset=ISO-8859-1") == "ISO-8859-1"

    def test_default_utf8(self) -> None:
        assert detect_encoding(b"<rss/>", None) == "utf-8"

    def test_unknown_declared_encoding_falls_through(self) -> None:
        content = b'<?xml version="1.0" encoding="klingon-8"?><rss/>'
        assert detect_encoding(content, "text/xml; charset=latin-1") == "latin-1"

    def test_declaration_after_100_bytes_ignored(self) -> None:
        content = b" " * 120 + b'<?xml version="1.0" encoding="latin-1"?>'
        assert detect_encoding(content) == "utf-8"


class TestDecodeBody:
    def test_bom_stripped(self) -> None:
        assert decode_body("\ufeff<rss/>".encode("utf-8")) == "<rss/>"

    def test_invalid_bytes_replaced(self) -> None:
        text = decode_body(b"<title>bad \xff byte</title>")
        assert "\ufffd" in text

    def test_binary_codec_declaration_ignored(self) -> None:
        content = b'<?xml version="1.0" encoding="hex"?><rss/>'
        assert detect_encoding(content, "text/xml; charset=base64") == "utf-8"


class TestDecodeBodyCodecs:
    def test_declared_hex_decodes_as_utf8(self) -> None:
        content = '<?xml version="1.0" encoding="hex"?><rss><title>Zażółć</title></rss>'.encode("utf-8")
        assert "Zażółć" in decode_body(content)

    def test_content_type_base64_decodes_as_utf8(self) -> None:
        assert decode_body(b"<rss/>", "application/rss+xml; charset=base64") == "<rss/>"
