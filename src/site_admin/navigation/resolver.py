"""Navigation order resolver.

Turns a site's feature selection and the admin navigation catalog into the
sequence of menu entries a caller sees. Pure: no state is held between calls.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from site_admin.models import (
    FeatureIdentifier,
    NavItem,
    SiteFeatureSelection,
    UserRole,
    role_satisfies,
)

RoleCheck = Callable[[UserRole | None, UserRole], bool]

DEFAULT_NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem(key="dashboard", label="Dashboard", href="/admin",
            feature=FeatureIdentifier.DASHBOARD),
    NavItem(key="hero", label="Hero", href="/admin/hero",
            feature=FeatureIdentifier.HERO),
    NavItem(key="products", label="Products", href="/admin/products",
            feature=FeatureIdentifier.PRODUCTS),
    NavItem(key="categories", label="Categories", href="/admin/categories",
            feature=FeatureIdentifier.CATEGORIES),
    NavItem(key="events", label="Bookings", href="/admin/events",
            feature=FeatureIdentifier.EVENTS),
    NavItem(key="event-services", label="Event Services", href="/admin/event-services",
            feature=FeatureIdentifier.EVENT_SERVICES),
    NavItem(key="about", label="About Us", href="/admin/about",
            feature=FeatureIdentifier.ABOUT),
    NavItem(key="contact", label="Contact Info", href="/admin/contact",
            feature=FeatureIdentifier.CONTACT),
    NavItem(key="site-settings", label="Site Settings", href="/admin/site-settings",
            required_role=UserRole.ADMIN),
    NavItem(key="settings", label="Package Settings", href="/admin/settings",
            required_role=UserRole.SUPER_ADMIN),
)


def resolve_order(
    selection: SiteFeatureSelection,
    nav_items: Sequence[NavItem] = DEFAULT_NAV_ITEMS,
    caller_role: UserRole | None = None,
    role_check: RoleCheck | None = None,
) -> list[NavItem]:
    """Return the visible navigation items in display order.

    Feature-gated items come first, sorted by their position in
    ``selection.order``; selected features missing from the order follow in
    catalog order. Ungated items are appended last, filtered by *role_check*
    (defaults to role rank comparison).
    """
    check = role_check or role_satisfies
    selected = selection.feature_set
    position = {f: i for i, f in enumerate(selection.order)}
    unordered = len(position)

    gated: list[tuple[int, int, NavItem]] = []
    ungated: list[NavItem] = []
    for index, item in enumerate(nav_items):
        if item.feature is None:
            if item.required_role is None or check(caller_role, item.required_role):
                ungated.append(item)
            continue
        if item.feature not in selected:
            continue
        # Dashboard is pinned first regardless of the stored order.
        if item.feature == FeatureIdentifier.DASHBOARD:
            rank = -1
        else:
            rank = position.get(item.feature, unordered)
        gated.append((rank, index, item))

    gated.sort(key=lambda entry: (entry[0], entry[1]))
    return [item for _, _, item in gated] + ungated
