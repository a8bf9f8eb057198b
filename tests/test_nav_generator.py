from app.navigation.nav_generator import (
    filter_sections_for,
    find_routes_missing_nav,
    generate_nav_sections,
    get_nav_sections,
)
from app.navigation.route_data import ROUTE_DATA, SECTION_ORDER


def test_sections_follow_declared_order_and_items_sort_by_order():
    tree = [
        {"path": "b", "nav": {"section": "Sistema", "label": "B", "order": 2}},
        {"path": "a", "nav": {"section": "Sistema", "label": "A", "order": 1}},
        {"path": "cal", "nav": {"section": "Calendario", "label": "Cal", "order": 0}},
        {"path": "x", "nav": {"section": "Extra", "label": "X"}},
    ]
    sections = generate_nav_sections(tree)
    assert [s.title for s in sections] == ["Calendario", "Sistema", "Extra"]
    assert [i.label for i in sections[1].items] == ["A", "B"]
    assert sections[1].items[0].to == "/a"


def test_item_carries_its_own_required_permission():
    tree = [{
        "path": "settings",
        "children": [{
            "path": "roles",
            "nav": {"section": "Sistema", "label": "Roles", "icon": "Shield"},
            "permission": {"action": "read", "subject": "Role"},
        }],
    }]
    item = generate_nav_sections(tree)[0].items[0]
    assert item.to == "/settings/roles"
    assert item.icon == "Shield"
    assert (item.required_permission.action, item.required_permission.subject) == ("read", "Role")


def test_route_data_sections_are_known():
    titles = [s.title for s in get_nav_sections()]
    assert titles == [t for t in SECTION_ORDER if t in titles]
    assert len(titles) == len(set(titles))


def test_filter_sections_for_user_ability():
    sections = generate_nav_sections(ROUTE_DATA)
    only_roles = filter_sections_for(sections, lambda a, s: (a, s) == ("read", "Role"))
    labels = [i.label for s in only_roles for i in s.items]
    assert "Roles y Permisos" in labels
    for s in only_roles:
        for i in s.items:
            assert i.required_permission is None or i.required_permission.subject == "Role"


def test_routes_missing_nav_skip_hidden_and_technical_paths():
    tree = [
        {"path": "reports", "permission": {"action": "read", "subject": "Report"}},
        {"path": "hidden", "permission": {"action": "read", "subject": "X"}, "hide_from_nav": True},
        {"path": "account", "permission": {"action": "read", "subject": "User"}},
        {
            "path": "people",
            "nav": {"section": "Sistema", "label": "Personas"},
            "children": [{"path": ":id", "permission": {"action": "read", "subject": "Person"}}],
        },
    ]
    assert find_routes_missing_nav(tree) == ["/reports"]
