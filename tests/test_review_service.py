import threading

import pytest

import review_service
import stores
from errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from review_service import coerce_rating


@pytest.fixture
def service():
    return stores.REVIEW_SERVICE


def make_review(service, user, title="Dune", author="Frank Herbert", rating=5, **kwargs):
    return service.create(user, title, author, kwargs.pop("text", "Great"), rating, **kwargs)


@pytest.mark.parametrize("value,expected", [
    (1, 1), (5, 5), (3.0, 3),
    (0, None), (6, None), (5.5, None), ("5", None), (True, None), (None, None), ([5], None),
])
def test_coerce_rating(value, expected):
    assert coerce_rating(value) == expected


def test_create_normalizes_and_stamps(service, alice):
    review = make_review(
        service, alice, title="  Dune ", author=" Frank Herbert ",
        tags=[f"t{i}" for i in range(12)],
    )

    assert review["bookTitle"] == "Dune"
    assert review["author"] == "Frank Herbert"
    assert review["status"] == "pending"
    assert review["userId"] == "user-1"
    assert review["username"] == "alice"
    assert len(review["tags"]) == 10
    assert review["createdAt"] == review["updatedAt"]
    assert review["createdAt"].endswith("Z")
    assert service.store.read_reviews() == [review]


def test_create_keeps_custom_status_and_drops_non_list_tags(service, alice):
    review = make_review(service, alice, tags="classic", status="published")
    assert review["tags"] == []
    assert review["status"] == "published"


@pytest.mark.parametrize("title,author,text", [
    ("", "Frank Herbert", "Great"),
    ("Dune", None, "Great"),
    ("Dune", "Frank Herbert", ""),
    ("   ", "Frank Herbert", "Great"),
    ("Dune", "Frank Herbert", 0),
    ("Dune", "Frank Herbert", False),
    ("Dune", "Frank Herbert", []),
    ("Dune", "Frank Herbert", {}),
])
def test_create_requires_title_author_and_text(service, alice, title, author, text):
    with pytest.raises(ValidationError, match="required"):
        service.create(alice, title, author, text, 4)


@pytest.mark.parametrize("rating", [5.5, "5", 0, 6, None])
def test_create_rejects_invalid_rating(service, alice, rating):
    with pytest.raises(ValidationError, match="rating"):
        make_review(service, alice, rating=rating)
    assert service.store.read_reviews() == []


def test_create_detects_duplicates_per_user(service, alice, bob):
    make_review(service, alice)

    with pytest.raises(ConflictError):
        make_review(service, alice, title="  dUNE", author="FRANK HERBERT  ")

    # Another user may review the same book
    other = make_review(service, bob)
    assert other["userId"] == "user-2"


def test_list_filters_compose(service, alice, bob):
    make_review(service, alice, title="Dune", author="Frank Herbert", rating=5)
    make_review(service, alice, title="Emma", author="Jane Austen", rating=3, status="Published")
    make_review(service, bob, title="Dune Messiah", author="Frank Herbert", rating=3)

    assert len(service.list_reviews(author="herbert")) == 2
    assert [r["bookTitle"] for r in service.list_reviews(author="HERB", rating="3")] == ["Dune Messiah"]
    assert [r["bookTitle"] for r in service.list_reviews(status="published")] == ["Emma"]
    assert service.list_reviews(status="publ") == []
    assert len(service.list_reviews(author="")) == 3


def test_list_rejects_non_integer_rating(service):
    with pytest.raises(ValidationError):
        service.list_reviews(rating="abc")


def test_list_sort_by_rating_and_date(service, alice, monkeypatch):
    stamps = iter([
        "2024-03-01T00:00:00.000Z",
        "2024-01-01T00:00:00.000Z",
        "2024-02-01T00:00:00.000Z",
    ])
    monkeypatch.setattr(review_service, "now_iso", lambda: next(stamps))
    make_review(service, alice, title="A", rating=2)
    make_review(service, alice, title="B", rating=5)
    make_review(service, alice, title="C", rating=4)

    assert [r["rating"] for r in service.list_reviews(sort="rating:desc")] == [5, 4, 2]
    assert [r["rating"] for r in service.list_reviews(sort="rating")] == [2, 4, 5]
    assert [r["bookTitle"] for r in service.list_reviews(sort="date:asc")] == ["B", "C", "A"]
    assert [r["bookTitle"] for r in service.list_reviews(sort="createdAt:desc")] == ["A", "C", "B"]
    assert [r["bookTitle"] for r in service.list_reviews()] == ["A", "B", "C"]


def test_list_rejects_unknown_sort_key(service):
    with pytest.raises(ValidationError, match="Unsupported sort key"):
        service.list_reviews(sort="title:asc")


def test_update_applies_only_provided_fields(service, alice, monkeypatch):
    review = make_review(service, alice, tags=["sf"])
    monkeypatch.setattr(review_service, "now_iso", lambda: "2099-01-01T00:00:00.000Z")

    updated = service.update(alice, review["id"], rating=3)

    assert updated["rating"] == 3
    assert updated["reviewText"] == "Great"
    assert updated["tags"] == ["sf"]
    assert updated["updatedAt"] == "2099-01-01T00:00:00.000Z"
    assert updated["createdAt"] == review["createdAt"]
    assert service.list_reviews()[0]["rating"] == 3


def test_update_text_and_tags(service, alice):
    review = make_review(service, alice, tags=["sf"])

    updated = service.update(alice, review["id"], review_text="Even better", tags=list("abcdefghijkl"))
    assert updated["reviewText"] == "Even better"
    assert len(updated["tags"]) == 10

    kept = service.update(alice, review["id"], tags="not-a-list")
    assert len(kept["tags"]) == 10


def test_update_rejects_invalid_rating_before_lookup(service, alice):
    with pytest.raises(ValidationError):
        service.update(alice, "missing", rating=9)
    with pytest.raises(ValidationError):
        service.update(alice, "missing", rating=None)


def test_update_is_owner_only_even_for_admins(service, alice, bob):
    review = make_review(service, alice)

    with pytest.raises(AuthorizationError):
        service.update(bob, review["id"], rating=1)
    with pytest.raises(NotFoundError):
        service.update(alice, "no-such-id", rating=1)


def test_delete_by_owner_or_admin(service, alice, bob, carol):
    first = make_review(service, alice, title="Dune")
    second = make_review(service, alice, title="Emma", author="Jane Austen")

    with pytest.raises(AuthorizationError):
        service.delete(carol, first["id"])

    assert service.delete(bob, first["id"]) == {"message": "Review deleted"}
    assert service.delete(alice, second["id"]) == {"message": "Review deleted"}
    assert service.list_reviews() == []

    with pytest.raises(NotFoundError):
        service.delete(alice, first["id"])


@pytest.mark.parametrize("rating", ["1_0", "5abc", "4.0", "--5"])
def test_list_rating_filter_must_be_plain_integer(service, rating):
    with pytest.raises(ValidationError):
        service.list_reviews(rating=rating)


def test_list_rating_filter_accepts_sign_and_spaces(service, alice):
    make_review(service, alice, rating=5)
    assert len(service.list_reviews(rating=" +5 ")) == 1


def test_concurrent_creates_all_persist(service, alice):
    errors = []

    def create(i):
        try:
            make_review(service, alice, title=f"Book {i}")
        except Exception as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)

    threads = [threading.Thread(target=create, args=(i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    titles = {r["bookTitle"] for r in service.store.read_reviews()}
    assert titles == {f"Book {i}" for i in range(20)}
