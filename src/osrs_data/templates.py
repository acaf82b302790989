"""
Template access for raw wikitext.

Thin layer over mwparserfromhell: everything the extractors need from a page
is "give me the parameters of every {{Name|...}} block", as flat string maps.
HTML comments are dropped before parsing and positional parameters are keyed
"1", "2", ... the way MediaWiki numbers them.
"""

import re

import mwparserfromhell
from mwparserfromhell.nodes import Template
from mwparserfromhell.wikicode import Wikicode


def normalize_template_name(name: str) -> str:
    return re.sub(r"[\s_]+", " ", name).strip().lower()


def parse_wikitext(text: str) -> Wikicode:
    code = mwparserfromhell.parse(text)
    for comment in code.filter_comments():
        code.remove(comment)
    return code


def template_params(template: Template) -> dict[str, str]:
    params: dict[str, str] = {}
    for param in template.params:
        key = str(param.name).strip()
        if key:
            params[key] = str(param.value).strip()
    return params


def iter_templates(code: Wikicode, name: str) -> list[Template]:
    wanted = normalize_template_name(name)
    return [
        t for t in code.filter_templates(recursive=True)
        if normalize_template_name(str(t.name)) == wanted
    ]


def parse_templates(text: str | None, name: str) -> list[dict[str, str]]:
    """Return the parameter map of every ``{{name|...}}`` block in page order."""
    if not text:
        return []
    return [template_params(t) for t in iter_templates(parse_wikitext(text), name)]


def first_template(text: str | None, name: str) -> dict[str, str] | None:
    templates = parse_templates(text, name)
    return templates[0] if templates else None


def has_template(text: str | None, name: str) -> bool:
    """Cheap marker check before a full parse."""
    if not text:
        return False
    pattern = re.escape(name).replace(r"\ ", " ").replace(" ", "[ _]+")
    return re.search(r"\{\{\s*" + pattern + r"\s*[|}]", text, re.IGNORECASE) is not None


def clean_markup(value: str | None) -> str | None:
    """Reduce a wikitext fragment to its plain text: links unwrapped, templates dropped."""
    if value is None:
        return None
    cleaned = re.sub(r"\s+", " ", parse_wikitext(value).strip_code()).strip()
    return cleaned or None
