"""Question routes: auth, ownership and the full book flow over HTTP."""

import uuid

from app.models import Role
from tests.fakes import auth_header


async def test_requests_without_token_are_unauthenticated(client, owner):
    resp = await client.get("/api/questions", params={"user_id": owner.id})

    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "unauthenticated"


async def test_garbled_token_is_unauthenticated(client, owner):
    resp = await client.get(
        "/api/questions", params={"user_id": owner.id}, headers={"Authorization": "Bearer nope"},
    )
    assert resp.status_code == 401


async def test_listing_someone_elses_questions_is_forbidden(client, owner, stranger):
    resp = await client.get("/api/questions", params={"user_id": owner.id}, headers=auth_header(stranger.id))

    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "forbidden"


async def test_admin_cannot_read_other_users_questions(client, owner, admin):
    resp = await client.get(
        "/api/questions", params={"user_id": owner.id}, headers=auth_header(admin.id, Role.admin),
    )
    assert resp.status_code == 403


async def test_only_admins_create_catalog_entries(client, owner, admin):
    body = {"title": "What is your earliest memory?"}

    denied = await client.post("/api/questions/newGlobalQuestion", json=body, headers=auth_header(owner.id))
    assert denied.status_code == 403

    created = await client.post(
        "/api/questions/newGlobalQuestion", json=body, headers=auth_header(admin.id, Role.admin),
    )
    assert created.status_code == 200
    assert created.json()["title"] == "What is your earliest memory?"
    assert created.json()["category_id"] == "ea815826-0c02-e446-a984-00f62a687381"


async def test_catalog_entry_in_unknown_category_is_not_found(client, admin):
    resp = await client.post(
        "/api/questions/newGlobalQuestion",
        json={"title": "Orphan", "category_id": str(uuid.uuid4())},
        headers=auth_header(admin.id, Role.admin),
    )
    assert resp.status_code == 404


async def test_catalog_listing_hides_taken_entries(client, owner, make_category, make_global_question):
    cat = await make_category("Childhood")
    taken = await make_global_question("First pet?", cat)
    free = await make_global_question("First school?", cat)
    headers = auth_header(owner.id)

    resp = await client.get(
        "/api/questions/new",
        params={"user_id": owner.id, "global_question_ids": [str(taken.id)]},
        headers=headers,
    )
    assert resp.status_code == 200

    listing = await client.get("/api/questions/global", params={"user_id": owner.id}, headers=headers)
    ids = {gq["id"] for gq in listing.json()["global_questions"]}
    assert str(free.id) in ids
    assert str(taken.id) not in ids

    everything = await client.get("/api/questions/global", headers=headers)
    assert str(taken.id) in {gq["id"] for gq in everything.json()["global_questions"]}


async def test_catalog_listing_filters_by_category(client, owner, make_category, make_global_question):
    cat_a = await make_category("A")
    cat_b = await make_category("B")
    in_a = await make_global_question("In A", cat_a)
    await make_global_question("In B", cat_b)

    resp = await client.get(
        "/api/questions/global", params={"category_ids": [str(cat_a.id)]}, headers=auth_header(owner.id),
    )

    assert [gq["id"] for gq in resp.json()["global_questions"]] == [str(in_a.id)]


async def test_catalog_listing_for_someone_else_is_forbidden(client, owner, stranger):
    resp = await client.get(
        "/api/questions/global", params={"user_id": owner.id}, headers=auth_header(stranger.id),
    )

    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "forbidden"


async def test_catalog_listing_combines_taken_and_category_filters(
    client, owner, make_category, make_global_question,
):
    cat_a = await make_category("A")
    cat_b = await make_category("B")
    taken_a = await make_global_question("Taken in A", cat_a)
    free_a = await make_global_question("Free in A", cat_a)
    await make_global_question("Free in B", cat_b)
    headers = auth_header(owner.id)
    await client.get(
        "/api/questions/new", params={"user_id": owner.id, "global_question_ids": [str(taken_a.id)]}, headers=headers,
    )

    resp = await client.get(
        "/api/questions/global",
        params={"user_id": owner.id, "category_ids": [str(cat_a.id)]},
        headers=headers,
    )

    assert resp.status_code == 200
    assert [gq["id"] for gq in resp.json()["global_questions"]] == [str(free_a.id)]


async def test_answering_someone_elses_question_is_forbidden(client, owner, stranger):
    created = await client.post(
        "/api/questions/new", json={"user_id": owner.id, "title": "Mine"}, headers=auth_header(owner.id),
    )
    question_id = created.json()["id"]

    resp = await client.patch(
        f"/api/questions/{question_id}", json={"answer": "hijack"}, headers=auth_header(stranger.id),
    )
    assert resp.status_code == 403


async def test_answering_unknown_question_is_not_found(client, owner):
    resp = await client.patch(
        f"/api/questions/{uuid.uuid4()}", json={"answer": "x"}, headers=auth_header(owner.id),
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "not_found"


async def test_book_without_address_is_precondition_failed(client, owner, channel, renderer):
    headers = auth_header(owner.id)
    created = await client.post("/api/questions/new", json={"user_id": owner.id, "title": "Q"}, headers=headers)
    await client.patch(
        f"/api/questions/{created.json()['id']}", json={"answer": "A", "new_status": "answered"}, headers=headers,
    )

    resp = await client.post("/api/questions/book", params={"user_id": owner.id}, headers=headers)

    assert resp.status_code == 412
    assert resp.json()["error"]["code"] == "precondition_failed"
    assert renderer.calls == []


async def test_book_without_answers_is_bad_request(client, owner, owner_address, channel):
    resp = await client.post("/api/questions/book", params={"user_id": owner.id}, headers=auth_header(owner.id))

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "insufficient_content"
    assert channel.sent == []


async def test_book_renderer_failure_is_bad_gateway(client, owner, owner_address, renderer):
    from app.services.renderer import RenderError

    headers = auth_header(owner.id)
    created = await client.post("/api/questions/new", json={"user_id": owner.id, "title": "Q"}, headers=headers)
    await client.patch(
        f"/api/questions/{created.json()['id']}", json={"answer": "A", "new_status": "answered"}, headers=headers,
    )
    renderer.error = RenderError("exit code 1: Exit with code 1 due to network error: HostNotFoundError")

    resp = await client.post("/api/questions/book", params={"user_id": owner.id}, headers=headers)

    assert resp.status_code == 502
    assert resp.json() == {"error": {"code": "upstream_failure", "message": "renderer failed"}}
    assert "HostNotFoundError" not in resp.text


async def test_book_delivery_failure_hides_smtp_detail(client, owner, owner_address, channel):
    from app.services.mailer import DeliveryError

    headers = auth_header(owner.id)
    created = await client.post("/api/questions/new", json={"user_id": owner.id, "title": "Q"}, headers=headers)
    await client.patch(
        f"/api/questions/{created.json()['id']}", json={"answer": "A", "new_status": "answered"}, headers=headers,
    )
    channel.error = DeliveryError("SMTP error: (535, b'Username and Password not accepted')")

    resp = await client.post("/api/questions/book", params={"user_id": owner.id}, headers=headers)

    assert resp.status_code == 502
    assert resp.json()["error"]["message"] == "delivery channel failed"
    assert "535" not in resp.text


async def test_full_flow_from_catalog_to_book(
    client, owner, admin, owner_address, renderer, channel, make_category,
):
    admin_headers = auth_header(admin.id, Role.admin)
    headers = auth_header(owner.id)
    cat1 = await make_category("Childhood")
    cat2 = await make_category("Career")

    q1 = (await client.post(
        "/api/questions/newGlobalQuestion",
        json={"title": "Where did you grow up?", "category_id": str(cat1.id)},
        headers=admin_headers,
    )).json()
    q2 = (await client.post(
        "/api/questions/newGlobalQuestion",
        json={"title": "What was your first job?", "category_id": str(cat2.id)},
        headers=admin_headers,
    )).json()

    created = await client.get(
        "/api/questions/new",
        params={"user_id": owner.id, "global_question_ids": [q1["id"], q2["id"]]},
        headers=headers,
    )
    copies = created.json()["questions"]
    assert len(copies) == 2
    assert {c["status"] for c in copies} == {"unanswered"}
    assert {c["origin"] for c in copies} == {"catalog"}

    first = next(c for c in copies if c["global_question_id"] == q1["id"])
    patched = await client.patch(
        f"/api/questions/{first['id']}", json={"answer": "X", "new_status": "answered"}, headers=headers,
    )
    assert patched.status_code == 200
    assert patched.json()["answer"] == "X"
    assert patched.json()["category_id"] == str(cat1.id)

    listing = await client.get("/api/questions", params={"user_id": owner.id}, headers=headers)
    assert len(listing.json()["questions"]) == 2

    book = await client.post("/api/questions/book", params={"user_id": owner.id}, headers=headers)

    assert book.status_code == 200
    assert book.json() == {
        "user_id": owner.id,
        "question_count": 1,
        "recipient": "rememory.notifications@yandex.ru",
        "filename": "answers.pdf",
        "status": "delivered",
    }
    markup = renderer.calls[0]["markup"]
    assert "X" in markup
    assert "What was your first job?" not in markup
    assert len(channel.sent) == 1
