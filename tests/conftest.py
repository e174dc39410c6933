import httpx
import pytest
from fastapi.testclient import TestClient

from subcache.core.config import Settings, UpstreamConfig
from subcache.main import create_app

UPSTREAM_URL = "http://example.test/sub"

MINIMAL_DOCUMENT = b"""proxies: []
proxy-groups:
  - name: Proxy
    type: select
    proxies: []
rules: []
"""

FULL_DOCUMENT = """port: 7890
mode: rule
proxies:
  - name: "hk-01"
    server: hk.example.test
    port: 443
    type: vmess
    uuid: 2d3b6a1c-7c1f-4d7e-9f44-0f0e7a5c9b11
    alterId: 0
    cipher: auto
    tls: true
    network: ws
    ws-path: /ray
    ws-headers:
      Host: cdn.example.test
    udp: true
  - name: "jp-02"
    server: 203.0.113.7
    port: 8388
    type: ss
    cipher: aes-256-gcm
    password: secret
proxy-groups:
  - name: 节点选择
    type: select
    proxies:
      - hk-01
      - jp-02
rules:
  - DOMAIN-SUFFIX,google.com,节点选择
  - MATCH,DIRECT
""".encode("utf-8")


@pytest.fixture
def app_settings(tmp_path):
    s = Settings(environ={})
    s.CACHE_PATH = str(tmp_path / "cache.yaml")
    s.UPSTREAM_TIMEOUT = None
    return s


@pytest.fixture
def make_client(app_settings):
    """Returns a factory building a TestClient whose upstream is answered by `responder`."""

    def _make(responder, url: str = UPSTREAM_URL):
        app = create_app(
            UpstreamConfig(url=url),
            app_settings=app_settings,
            transport=httpx.MockTransport(responder),
        )
        return TestClient(app)

    return _make
