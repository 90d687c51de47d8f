"""
Read-only page structure queries (landmarks, headings, forms, interactive elements)
"""
from typing import Any, Dict, Iterable, Optional

from playwright.async_api import Page

from .config import MAX_STRUCTURE_ITEMS
from .errors import ElementNotFoundError, ToolUsageError

STRUCTURE_PARTS = ("landmarks", "headings", "forms", "interactive")

STRUCTURE_JS = """
({ scope, include, limit }) => {
    const root = scope ? document.querySelector(scope) : document.body;
    if (!root) return null;
    const text = el => (el.innerText || el.textContent || '').trim().replace(/\\s+/g, ' ').slice(0, 120);
    const describe = el => {
        if (el.id) return '#' + el.id;
        const name = el.getAttribute('name');
        if (name) return `${el.tagName.toLowerCase()}[name="${name}"]`;
        return el.tagName.toLowerCase();
    };
    const visible = el => !!(el.offsetWidth || el.offsetHeight || el.getClientRects().length);
    const labelFor = el => {
        if (el.labels && el.labels.length) return text(el.labels[0]);
        return el.getAttribute('aria-label') || el.getAttribute('placeholder') || '';
    };
    const out = {};

    if (include.includes('landmarks')) {
        const implicit = { header: 'banner', nav: 'navigation', main: 'main', aside: 'complementary',
                           footer: 'contentinfo', form: 'form', search: 'search' };
        const sel = '[role=banner],[role=navigation],[role=main],[role=complementary],' +
                    '[role=contentinfo],[role=search],[role=region],header,nav,main,aside,footer';
        out.landmarks = Array.from(root.querySelectorAll(sel)).slice(0, limit).map(el => ({
            role: el.getAttribute('role') || implicit[el.tagName.toLowerCase()] || 'region',
            label: el.getAttribute('aria-label') || '',
            selector: describe(el),
        }));
    }

    if (include.includes('headings')) {
        out.headings = Array.from(root.querySelectorAll('h1,h2,h3,h4,h5,h6,[role=heading]'))
            .slice(0, limit)
            .map(el => ({
                level: Number(el.getAttribute('aria-level')) || Number(el.tagName.slice(1)) || 2,
                text: text(el),
            }));
    }

    if (include.includes('forms')) {
        out.forms = Array.from(root.querySelectorAll('form')).slice(0, limit).map(form => ({
            selector: describe(form),
            action: form.getAttribute('action') || '',
            method: (form.getAttribute('method') || 'get').toLowerCase(),
            fields: Array.from(form.elements).filter(el => el.tagName !== 'FIELDSET').map(el => ({
                tag: el.tagName.toLowerCase(),
                type: el.type || '',
                name: el.name || '',
                label: labelFor(el),
                required: !!el.required,
                selector: describe(el),
            })),
        }));
    }

    if (include.includes('interactive')) {
        const sel = 'a[href],button,input:not([type=hidden]),select,textarea,[role=button],[role=link],[tabindex]';
        out.interactive = Array.from(root.querySelectorAll(sel)).filter(visible).slice(0, limit).map(el => ({
            tag: el.tagName.toLowerCase(),
            role: el.getAttribute('role') || '',
            text: text(el) || labelFor(el),
            selector: describe(el),
        }));
    }
    return out;
}
"""


async def extract_page_structure(
    page: Page,
    include: Optional[Iterable[str]] = None,
    selector: Optional[str] = None,
) -> Dict[str, Any]:
    """Query the page's structure; ``include`` picks which parts to return."""
    parts = list(include) if include else list(STRUCTURE_PARTS)
    unknown = [p for p in parts if p not in STRUCTURE_PARTS]
    if unknown:
        raise ToolUsageError(f"Unknown structure parts: {', '.join(unknown)}")

    structure = await page.evaluate(
        STRUCTURE_JS,
        {"scope": selector, "include": parts, "limit": MAX_STRUCTURE_ITEMS},
    )
    if structure is None:
        raise ElementNotFoundError(selector)

    return {
        "url": page.url,
        "title": await page.title(),
        **structure,
    }
