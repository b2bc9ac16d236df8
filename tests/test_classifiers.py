import pytest

from conftest import generate_req
from services.blocking.classifiers import (
    get_display_url,
    get_script_host,
    is_google_ads,
    is_gpt,
    is_gpt_impl_tag,
    is_gpt_tag,
    is_target_request,
)


@pytest.mark.parametrize("url", [
    "https://doubleclick.net",
    "https://securepubads.g.doubleclick.net/gampad/ads?iu=/123/slot",
    "https://pagead2.googlesyndication.com/pagead/js/adsbygoogle.js",
    "https://www.googletagservices.com/tag/js/gpt.js",
])
def test_google_ads_hosts(url):
    assert is_google_ads(url)


@pytest.mark.parametrize("url", [
    "https://example.com/ads.js",
    "https://notdoubleclick.net/",
    "https://doubleclick.net.example.com/",
    "not a url",
    "",
])
def test_other_hosts_are_not_google_ads(url):
    assert not is_google_ads(url)


@pytest.mark.parametrize("url", [
    "https://www.googletagservices.com/tag/js/gpt.js",
    "https://securepubads.g.doubleclick.net/tag/js/gpt.js?network-code=123",
    "https://pagead2.googlesyndication.com/tag/js/gpt_mobile.js",
    "https://securepubads.g.doubleclick.net/gpt/pubads_impl_2019072601.js",
    "https://securepubads.g.doubleclick.net/gpt/pubads_impl_modern_2019072601.js",
])
def test_tag_library_scripts(url):
    assert is_gpt(url)


@pytest.mark.parametrize("url", [
    "https://example.com/tag/js/gpt.js",
    "https://example.com/gpt/pubads_impl_2019072601.js",
    "https://securepubads.g.doubleclick.net/gpt/pubads_impl_rendering_2019072601.js",
    "https://pagead2.googlesyndication.com/pagead/show_ads.js",
])
def test_other_scripts_are_not_tag_library(url):
    assert not is_gpt(url)


@pytest.mark.parametrize("url, tag, impl", [
    ("https://www.googletagservices.com/tag/js/gpt.js", True, False),
    ("https://securepubads.g.doubleclick.net/tag/js/gpt_mobile.js", True, False),
    ("https://example.com/tag/js/gpt.js", False, False),
    ("https://securepubads.g.doubleclick.net/gpt/pubads_impl_2019072601.js", False, True),
    ("https://securepubads.g.doubleclick.net/gpt/pubads_impl_rendering_2019072601.js", False, False),
    ("https://example.com/gpt/pubads_impl_2019072601.js", False, False),
])
def test_loader_and_implementation_scripts(url, tag, impl):
    assert is_gpt_tag(url) is tag
    assert is_gpt_impl_tag(url) is impl


def test_target_requests_are_ad_xhrs():
    ad_url = "https://securepubads.g.doubleclick.net/gampad/ads"
    assert is_target_request(generate_req([0, 1, 2], 1, ad_url, "XHR"))
    assert not is_target_request(generate_req([0, 1, 2], 2, ad_url, "Script"))
    assert not is_target_request(generate_req([0, 1, 2], 3, "https://example.com/api", "XHR"))


@pytest.mark.parametrize("url, expected", [
    ("https://a.com/s.js", "a.com/s.js"),
    ("https://a.com/s.js?v=1&x=2#frag", "a.com/s.js"),
    ("http://cdn.example.com:8080/lib/app.js", "cdn.example.com:8080/lib/app.js"),
    ("", None),
    (None, None),
])
def test_display_url(url, expected):
    assert get_display_url(url) == expected


@pytest.mark.parametrize("url, expected", [
    ("https://cdn.example.com/lib/app.js", "cdn.example.com"),
    ("cdn.example.com/lib/app.js", "cdn.example.com"),
    (None, ""),
])
def test_script_host(url, expected):
    assert get_script_host(url) == expected
