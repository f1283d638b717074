from business_ingest.etl import transform


def test_to_business_draft_basic_fields():
    place = {
        "title": "Kolachi",
        "address": "Do Darya, Karachi",
        "phone": "+92 21 1111111",
        "website": "https://kolachi.pk",
        "thumbnail": "https://img/kolachi.jpg",
    }

    draft = transform.to_business_draft(place, "restaurants", "Karachi", "Pakistan")

    assert draft.name == "Kolachi"
    assert draft.description == "Kolachi - restaurants in Karachi"
    assert draft.category == "restaurants"
    assert draft.address == "Do Darya, Karachi"
    assert draft.city == "Karachi"
    assert draft.country == "Pakistan"
    assert draft.phone == "+92 21 1111111"
    assert draft.website == "https://kolachi.pk"
    assert draft.profile_url == "https://img/kolachi.jpg"
    assert draft.rating == 0
    assert draft.reviews_count == 0


def test_to_business_draft_uses_fallbacks():
    place = {
        "title": "Aga Khan Hospital",
        "address_extensions": ["Stadium Road"],
        "contact": [{"phone": "021-111-911-911"}],
        "links": [{"link": "https://hospitals.aku.edu"}],
        "photos": ["https://img/aku.jpg"],
    }

    draft = transform.to_business_draft(place, "hospitals", "Karachi", "Pakistan")

    assert draft.address == "Stadium Road"
    assert draft.phone == "021-111-911-911"
    assert draft.website == "https://hospitals.aku.edu"
    assert draft.profile_url == "https://img/aku.jpg"


def test_to_business_draft_synthesizes_address_and_nulls():
    draft = transform.to_business_draft({"title": "Corner Shop"}, "supermarkets", "Lahore", "Pakistan")

    assert draft.address == "Lahore, Pakistan"
    assert draft.phone is None
    assert draft.website is None
    assert draft.profile_url is None


def test_profile_image_follows_source_order():
    place = {"title": "X", "icon": "icon.png", "logo": "logo.png", "images": ["first.png"]}
    draft = transform.to_business_draft(place, "schools", "Islamabad", "Pakistan")
    assert draft.profile_url == "logo.png"

    place = {"title": "X", "images": [], "photos": ["photo.png"]}
    draft = transform.to_business_draft(place, "schools", "Islamabad", "Pakistan")
    assert draft.profile_url == "photo.png"


def test_to_business_draft_rejects_missing_title():
    assert transform.to_business_draft({"place_id": "1"}, "schools", "Lahore", "Pakistan") is None
    assert transform.to_business_draft({"title": "  "}, "schools", "Lahore", "Pakistan") is None
    assert transform.to_business_draft(None, "schools", "Lahore", "Pakistan") is None


def test_to_business_draft_is_deterministic():
    place = {"title": "Same", "contact": [{"phone": "1"}], "images": ["a.png"]}
    first = transform.to_business_draft(place, "colleges", "Lahore", "Pakistan")
    second = transform.to_business_draft(place, "colleges", "Lahore", "Pakistan")
    assert first == second


def test_to_row_adds_pending_verification():
    draft = transform.to_business_draft({"title": "Acme"}, "IT companies", "Karachi", "Pakistan")
    row = draft.to_row()
    assert row["is_verified"] is False
    assert row["verification_status"] == "pending"
    assert row["our_rating"] == 0
    assert row["our_reviews_count"] == 0


def test_image_entries_that_are_objects_use_their_thumbnail():
    place = {
        "title": "Kolachi",
        "images": [{"title": "All", "thumbnail": "https://img/k.jpg"}],
        "photos": [{"image": "https://img/photo.jpg"}],
    }
    draft = transform.to_business_draft(place, "restaurants", "Karachi", "Pakistan")
    assert draft.profile_url == "https://img/k.jpg"

    place = {"title": "Kolachi", "images": [{"title": "All"}], "photos": [{"image": "https://img/photo.jpg"}]}
    draft = transform.to_business_draft(place, "restaurants", "Karachi", "Pakistan")
    assert draft.profile_url == "https://img/photo.jpg"


def test_non_string_values_never_reach_the_row():
    place = {
        "title": "Kolachi",
        "phone": 2135111111,
        "contact": [{"phone": {"number": "1"}}],
        "website": ["https://kolachi.pk"],
        "links": [{"link": "https://kolachi.pk"}],
        "address": {"street": "Do Darya"},
        "thumbnail": {"url": "https://img/k.jpg"},
        "images": [["nested"]],
    }

    row = transform.to_business_draft(place, "restaurants", "Karachi", "Pakistan").to_row()

    assert row["phone"] is None
    assert row["website"] == "https://kolachi.pk"
    assert row["address"] == "Karachi, Pakistan"
    assert row["profile_url"] is None
    assert all(value is None or isinstance(value, (str, bool, int, float)) for value in row.values())
