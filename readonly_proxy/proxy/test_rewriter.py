from readonly_proxy.models import InboundRequest
from readonly_proxy.proxy.rewriter import rewrite_url

UPSTREAM = dict(host="api.example.com", port=443, scheme="https", api_prefix="/api/1")


def _inbound(path, query=""):
    return InboundRequest(
        method="GET",
        path=path,
        query=query,
        headers={"host": "localhost:3000"},
        scheme="http",
    )


class TestRewriteUrl:
    def test_basic_path(self):
        target = rewrite_url(_inbound("/config"), **UPSTREAM)

        assert target.scheme == "https"
        assert target.host == "api.example.com"
        assert target.port == 443
        assert target.path == "/api/1/config"
        assert target.url == "https://api.example.com:443/api/1/config"

    def test_query_preserved(self):
        target = rewrite_url(_inbound("/worlds", "n=10&offset=0&sort=popularity"), **UPSTREAM)

        assert target.url == "https://api.example.com:443/api/1/worlds?n=10&offset=0&sort=popularity"

    def test_encoded_query_untouched(self):
        target = rewrite_url(_inbound("/search", "q=hello%20world&tag=foo%2Fbar"), **UPSTREAM)

        assert target.query == "q=hello%20world&tag=foo%2Fbar"

    def test_nested_path(self):
        target = rewrite_url(_inbound("/users/usr_123/worlds"), **UPSTREAM)

        assert target.path == "/api/1/users/usr_123/worlds"

    def test_inbound_host_is_ignored(self):
        inbound = InboundRequest(
            method="GET", path="/config", headers={"host": "evil.example.org:8443"}
        )

        target = rewrite_url(inbound, **UPSTREAM)

        assert target.host == "api.example.com"
        assert "evil" not in target.url

    def test_trailing_slash_on_prefix(self):
        target = rewrite_url(_inbound("/config"), **{**UPSTREAM, "api_prefix": "/api/1/"})

        assert target.path == "/api/1/config"

    def test_multiple_slashes_preserved(self):
        target = rewrite_url(_inbound("//api///users//"), **UPSTREAM)

        assert target.path == "/api/1//api///users//"

    def test_root_path_does_not_raise(self):
        target = rewrite_url(_inbound("/"), **UPSTREAM)

        assert target.path == "/api/1/"

    def test_defaults_come_from_settings(self):
        from readonly_proxy import vars as settings

        target = rewrite_url(_inbound("/config"))

        assert target.host == settings.UPSTREAM_HOST
        assert target.path.startswith(settings.UPSTREAM_API_PREFIX)
