from services.menu_service import clean_menu, list_locations

MENU_RESPONSE = {
    "menu": {
        "sections_1": [
            {
                "name": "Bowls",
                "items": [
                    {
                        "itemid": "101",
                        "sectionid": "7",
                        "name": "Teriyaki Bowl",
                        "description": "Rice, chicken",
                        "price_display": 1095,
                        "manual_online": 1,
                        "is_hidden": 0,
                        "unavailable_reason": 0,
                        "options": [
                            {
                                "optionid": "55",
                                "values": [
                                    {"valueid": "551", "qp_name": "Extra sauce", "price": 50},
                                    {"valueid": "552", "qp_name": "No onion", "price": 0},
                                ],
                            }
                        ],
                    },
                    {
                        "itemid": "102",
                        "sectionid": "7",
                        "name": "Hidden Special",
                        "price_display": 500,
                        "manual_online": 1,
                        "is_hidden": 1,
                    },
                    {
                        "itemid": "103",
                        "sectionid": "7",
                        "name": "Counter Only",
                        "price_display": 300,
                        "manual_online": 0,
                        "is_hidden": 0,
                    },
                    {
                        "itemid": "104",
                        "sectionid": "7",
                        "name": "Sold Out Soup",
                        "price_display": 450,
                        "manual_online": 1,
                        "is_hidden": 0,
                        "unavailable_reason": 2,
                    },
                ],
            }
        ]
    }
}


def test_clean_menu_drops_hidden_and_offline_items():
    items = clean_menu(MENU_RESPONSE)
    assert [item.name for item in items] == ["Teriyaki Bowl", "Sold Out Soup"]


def test_clean_menu_converts_prices_and_options():
    bowl = clean_menu(MENU_RESPONSE)[0]
    assert bowl.id == 101
    assert bowl.sectionid == 7
    assert bowl.price == 10.95
    assert bowl.category == "Bowls"
    assert bowl.available is True
    assert len(bowl.options) == 1
    extra, no_onion = bowl.options[0]
    assert extra.name == "Extra sauce"
    assert extra.price == 0.5
    assert extra.opt_id == 55
    assert extra.value_id == 551
    assert no_onion.price == 0


def test_unavailable_items_are_flagged():
    soup = clean_menu(MENU_RESPONSE)[1]
    assert soup.available is False


def test_clean_menu_tolerates_missing_sections():
    assert clean_menu({}) == []
    assert clean_menu({"menu": {"sections_1": None}}) == []


def test_locations_are_listed_by_name():
    locations = list_locations()
    names = [location.name for location in locations]
    assert names == sorted(names)
    assert {"location_id": "6", "name": "Spice Market"} in [
        location.model_dump() for location in locations
    ]
