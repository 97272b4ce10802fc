# tests/conftest.py
import pytest


def build_page(
        title="Acme Tools - Hand Tools for Every Workshop",
        description=None,
        head_extra="",
        body="",
):
    """Assembles a small HTML document around the given head/body fragments."""
    head = []
    if title is not None:
        head.append(f"<title>{title}</title>")
    if description is not None:
        head.append(f'<meta name="description" content="{description}">')
    head.append(head_extra)
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n"
        + "\n".join(head)
        + "\n</head>\n<body>\n"
        + body
        + "\n</body>\n</html>"
    )


@pytest.fixture
def optimal_page():
    """
    A page that is optimal in every local SEO category:
    40-char title, 100-char description, one H1, two H2s,
    two images with alt text, one link and 400 characters of text.
    """
    body = (
        "<h1>Workshop tools</h1>\n"
        "<h2>Hammers</h2>\n"
        "<h2>Saws</h2>\n"
        '<img src="/img/hammer.png" alt="Claw hammer">\n'
        '<img src="/img/saw.png" alt="Hand saw">\n'
        '<a href="/x">All tools</a>\n'
        f"<p>{'w' * 400}</p>"
    )
    return build_page(title="T" * 40, description="D" * 100, body=body)
