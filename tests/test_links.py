from yojana_assistant.schemas import Link
from yojana_assistant.tools.links import LINK_CATALOG, LOGIN_LINK, REGISTER_LINK, sanitize_links


def test_catalog_links_survive():
    links = sanitize_links([
        {"label": "Login", "url": LOGIN_LINK.url},
        {"label": "Register", "url": REGISTER_LINK.url},
    ])
    assert links == [LOGIN_LINK, REGISTER_LINK]


def test_invented_urls_are_dropped():
    links = sanitize_links([
        {"label": "Apply", "url": "https://divyangparbhani.altwise.in/home/apply"},
        {"label": "Phish", "url": "https://example.com/login"},
        {"label": "Login", "url": LOGIN_LINK.url + "?next=/"},
    ])
    assert links == []


def test_result_is_subset_of_catalog():
    candidates = [
        {"label": "x", "url": LOGIN_LINK.url},
        {"label": "y", "url": "http://divyangparbhani.altwise.in/home/login"},
        Link(label="z", url=REGISTER_LINK.url),
        "https://divyangparbhani.altwise.in/home/login",
        {"label": "no url"},
        None,
    ]
    links = sanitize_links(candidates)
    assert all(link in LINK_CATALOG for link in links)
    assert links == [LOGIN_LINK, REGISTER_LINK]


def test_catalog_label_replaces_model_label():
    links = sanitize_links([{"label": "click here!!", "url": LOGIN_LINK.url}])
    assert links[0].label == LOGIN_LINK.label


def test_duplicates_collapse():
    links = sanitize_links([{"url": LOGIN_LINK.url}, {"url": LOGIN_LINK.url}])
    assert links == [LOGIN_LINK]


def test_non_list_input():
    assert sanitize_links(None) == []
    assert sanitize_links({"url": LOGIN_LINK.url}) == []
    assert sanitize_links("https://divyangparbhani.altwise.in/home/login") == []


def test_custom_catalog():
    only_login = [LOGIN_LINK]
    assert sanitize_links([{"url": REGISTER_LINK.url}], only_login) == []
