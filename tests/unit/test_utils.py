"""Tests for utils - filename sanitisation, payload decoding, settings."""

import pytest

from inspection_export.exceptions import MalformedPayload
from inspection_export.utils.config import Settings
from inspection_export.utils.filenames import content_disposition, sanitize_filename
from inspection_export.utils.payloads import decode_payload, encode_payload


class TestSanitizeFilename:

    @pytest.mark.parametrize("raw,expected", [
        ("Report #1: Q&A.zip", "Report _1_ Q_A.zip"),
        ("a*b'c\"d,e&f#g^h@i:j;k+l.pdf", "a_b_c_d_e_f_g_h_i_j_k_l.pdf"),
        ("Inspection Summary_Jane Doe_05Mar2024 14H03M09S.pdf",
         "Inspection Summary_Jane Doe_05Mar2024 14H03M09S.pdf"),
        ("", ""),
    ])
    def test_replacements(self, raw, expected):
        assert sanitize_filename(raw) == expected

    def test_length_preserved(self):
        raw = "@@@;;;+++"
        assert len(sanitize_filename(raw)) == len(raw)

    def test_idempotent(self):
        once = sanitize_filename("x#y:z")
        assert sanitize_filename(once) == once


class TestContentDisposition:

    def test_ascii_name_plain(self):
        assert content_disposition("Summary _1.pdf") == 'attachment; filename="Summary _1.pdf"'

    def test_non_ascii_name(self):
        value = content_disposition("Inspection Summary_Nguyễn Văn.pdf")

        assert value.startswith('attachment; filename="Inspection Summary_Nguyen Van.pdf"')
        assert "filename*=UTF-8''Inspection%20Summary_Nguy%E1%BB%85n%20V%C4%83n.pdf" in value
        value.encode("latin-1")

    def test_fallback_never_empty(self):
        value = content_disposition("検査.zip")
        assert 'filename=".zip"' in value
        assert content_disposition("検査").startswith('attachment; filename="download"')


class TestPayloads:

    def test_encode_decode(self):
        assert decode_payload(encode_payload(b"\x00\x01binary")) == b"\x00\x01binary"

    def test_whitespace_tolerated(self):
        assert decode_payload("aGVs\nbG8=\n") == b"hello"

    def test_bytes_input(self):
        assert decode_payload(b"aGVsbG8=") == b"hello"

    @pytest.mark.parametrize("bad", ["not base64!", "aGVsbG8", "héllo"])
    def test_malformed(self, bad):
        with pytest.raises(MalformedPayload):
            decode_payload(bad, "entry")


class TestSettings:

    def test_defaults(self):
        config = Settings()
        assert config.page_size == "letter"
        assert config.page_margin == 72
        assert config.list_overflow_threshold == 600
        assert config.photo_batch_size == 150

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("EXPORT_PAGE_SIZE", "a4")
        monkeypatch.setenv("EXPORT_FINALIZE_TIMEOUT_SECONDS", "5")
        config = Settings()
        assert config.page_size == "a4"
        assert config.finalize_timeout_seconds == 5.0
