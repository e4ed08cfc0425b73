"""Shared fixtures for the weblog test suite."""

import pytest


SAMPLE_LINES = [
    '127.0.0.1 [01:02:03:04] "GET /index.html HTTP/1.0" 200 1024',
    'example.com [01:02:05:00] "GET /missing.gif HTTP/1.0" 404 -',
    '10.0.0.7 [01:03:00:00] "POST /cgi-bin/form HTTP/1.0" 200 350',
    '10.0.0.7 [02:00:00:10] "HEAD / HTTP/1.0" 200 0',
    '127.0.0.1 [02:14:30:00] "GET /images/big_photo.jpg HTTP/1.0" 200 80000',
    'host.example.org [02:14:31:00] "GET /images/bigger_photo.jpg HTTP/1.0" 200 95000',
    'host.example.org [03:09:00:00] "GET /docs/report.pdf HTTP/1.0" 500 0',
    '127.0.0.1 [03:09:10:00] "GET /index.html HTTP/1.0" 304 -',
    '127.0.0.1 [03:23:59:59] "GET /index.html HTTP/1.0" 200 1024',
]


@pytest.fixture
def sample_lines():
    return list(SAMPLE_LINES)


@pytest.fixture
def write_log(tmp_path):
    def _write(lines, name="access.log"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write
