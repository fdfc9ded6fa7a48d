from models.comments import Comment
from models.notes import ChecklistItem, Note


def _url(note, item_id=None):
    base = f"/api/notes/{note.id}/items"
    return f"{base}/{item_id}" if item_id else base


def test_append_to_empty_note_starts_at_zero(client, team, auth):
    resp = client.post(_url(team["note"]), json={"content": "  First  "}, headers=auth(team["alice"]))
    assert resp.status_code == 200
    item = resp.json()["item"]
    assert item["order"] == 0
    assert item["content"] == "First"
    assert item["checked"] is False


def test_append_takes_next_order(client, seed, team, auth):
    for index, content in enumerate(["a", "b", "c"]):
        seed.item(team["note"], content, index)
    resp = client.post(_url(team["note"]), json={"content": "d"}, headers=auth(team["alice"]))
    assert resp.status_code == 200
    assert resp.json()["item"]["order"] == 3


def test_append_rejects_blank_content(client, team, auth):
    resp = client.post(_url(team["note"]), json={"content": "   "}, headers=auth(team["alice"]))
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == "VALIDATION_FAILED"
    assert body["details"]


def test_non_author_cannot_edit_items(client, seed, team, auth):
    item = seed.item(team["note"], "a", 0)
    resp = client.put(_url(team["note"], item.id), json={"checked": True}, headers=auth(team["bob"]))
    assert resp.status_code == 403
    assert seed.get(ChecklistItem, item.id).checked is False


def test_admin_can_edit_any_item(client, seed, team, auth):
    item = seed.item(team["note"], "a", 0)
    resp = client.put(_url(team["note"], item.id), json={"content": "renamed"}, headers=auth(team["admin"]))
    assert resp.status_code == 200
    assert resp.json()["item"]["content"] == "renamed"
    assert resp.json()["item"]["version"] == 2


def test_item_from_another_note_is_not_found(client, seed, team, auth):
    other = seed.note(team["board"], team["alice"])
    item = seed.item(other, "elsewhere", 0)
    resp = client.put(_url(team["note"], item.id), json={"checked": True}, headers=auth(team["alice"]))
    assert resp.status_code == 404


def test_stale_item_version_is_rejected(client, seed, team, auth):
    item = seed.item(team["note"], "a", 0)
    headers = auth(team["alice"])
    assert client.put(_url(team["note"], item.id), json={"content": "b", "version": 1}, headers=headers).status_code == 200
    resp = client.put(_url(team["note"], item.id), json={"content": "c", "version": 1}, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "VERSION_CONFLICT"
    assert seed.get(ChecklistItem, item.id).content == "b"


def test_delete_compacts_remaining_orders(client, seed, team, auth):
    a = seed.item(team["note"], "a", 0)
    b = seed.item(team["note"], "b", 1)
    c = seed.item(team["note"], "c", 2)
    resp = client.delete(_url(team["note"], b.id), headers=auth(team["alice"]))
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    remaining = sorted(seed.fetch(ChecklistItem, note_id=team["note"].id), key=lambda i: i.order)
    assert [(i.id, i.order) for i in remaining] == [(a.id, 0), (c.id, 1)]


def test_reorder_scenario(client, seed, team, auth):
    a = seed.item(team["note"], "a", 0)
    b = seed.item(team["note"], "b", 1)
    headers = auth(team["alice"])
    resp = client.put(
        _url(team["note"], "reorder"),
        json={"items": [{"id": b.id, "order": 0}, {"id": a.id, "order": 1}]},
        headers=headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [i["id"] for i in body["items"]] == [b.id, a.id]
    assert body["version"] == 2

    listed = client.get(_url(team["note"]), headers=headers).json()
    assert [i["id"] for i in listed["items"]] == [b.id, a.id]


def test_reorder_count_mismatch_mutates_nothing(client, seed, team, auth):
    a = seed.item(team["note"], "a", 0)
    b = seed.item(team["note"], "b", 1)
    resp = client.put(
        _url(team["note"], "reorder"),
        json={"items": [{"id": b.id, "order": 0}]},
        headers=auth(team["alice"]),
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "COUNT_MISMATCH"
    assert seed.get(ChecklistItem, a.id).order == 0
    assert seed.get(ChecklistItem, b.id).order == 1
    assert seed.get(Note, team["note"].id).version == 1


def test_reorder_unknown_or_duplicate_ids(client, seed, team, auth):
    a = seed.item(team["note"], "a", 0)
    seed.item(team["note"], "b", 1)
    headers = auth(team["alice"])
    unknown = client.put(
        _url(team["note"], "reorder"),
        json={"items": [{"id": a.id, "order": 0}, {"id": "missing", "order": 1}]},
        headers=headers,
    )
    assert unknown.status_code == 404
    duplicate = client.put(
        _url(team["note"], "reorder"),
        json={"items": [{"id": a.id, "order": 0}, {"id": a.id, "order": 1}]},
        headers=headers,
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "VALIDATION_FAILED"


def test_reorder_with_stale_note_version(client, seed, team, auth):
    a = seed.item(team["note"], "a", 0)
    b = seed.item(team["note"], "b", 1)
    headers = auth(team["alice"])
    swap = {"items": [{"id": b.id, "order": 0}, {"id": a.id, "order": 1}], "version": 1}
    assert client.put(_url(team["note"], "reorder"), json=swap, headers=headers).status_code == 200
    back = {"items": [{"id": a.id, "order": 0}, {"id": b.id, "order": 1}], "version": 1}
    resp = client.put(_url(team["note"], "reorder"), json=back, headers=headers)
    assert resp.status_code == 409
    assert seed.get(ChecklistItem, b.id).order == 0


def test_display_view_lists_unchecked_first(client, seed, team, auth):
    a = seed.item(team["note"], "a", 0, checked=True)
    b = seed.item(team["note"], "b", 1)
    resp = client.get(_url(team["note"]), params={"view": "display"}, headers=auth(team["bob"]))
    assert resp.status_code == 200
    assert [i["id"] for i in resp.json()["items"]] == [b.id, a.id]


def test_item_creation_notifies_slack(client, team, auth, slack):
    client.post(_url(team["note"]), json={"content": "Ship release"}, headers=auth(team["alice"]))
    assert slack.sent == [("C0TEST", ":heavy_plus_sign: Ship release by Alice in Sprint")]


def test_double_check_inside_window_notifies_once(client, seed, team, auth, slack):
    item = seed.item(team["note"], "Write docs", 0)
    headers = auth(team["alice"])
    url = _url(team["note"], item.id)
    assert client.put(url, json={"checked": True}, headers=headers).status_code == 200
    assert client.put(url, json={"checked": False}, headers=headers).status_code == 200
    assert client.put(url, json={"checked": True}, headers=headers).status_code == 200
    assert len(slack.sent) == 1
    assert slack.sent[0][1].startswith(":white_check_mark: Write docs")


def test_check_after_window_notifies_again(client, seed, team, auth, slack, clock):
    item = seed.item(team["note"], "Write docs", 0)
    headers = auth(team["alice"])
    url = _url(team["note"], item.id)
    client.put(url, json={"checked": True}, headers=headers)
    client.put(url, json={"checked": False}, headers=headers)
    clock.advance(61)
    client.put(url, json={"checked": True}, headers=headers)
    assert len(slack.sent) == 2


def test_uncheck_and_content_edit_do_not_notify(client, seed, team, auth, slack):
    item = seed.item(team["note"], "Done already", 0, checked=True)
    headers = auth(team["alice"])
    client.put(_url(team["note"], item.id), json={"checked": False}, headers=headers)
    client.put(_url(team["note"], item.id), json={"content": "Edited"}, headers=headers)
    assert slack.sent == []


def test_board_with_slack_disabled_stays_quiet(client, seed, team, auth, slack):
    board = seed.board(team["org"], team["admin"], "Quiet", send_slack_updates=False)
    note = seed.note(board, team["alice"])
    client.post(_url(note), json={"content": "Hello"}, headers=auth(team["alice"]))
    assert slack.sent == []


def test_organization_without_slack_stays_quiet(client, seed, auth, slack):
    org = seed.organization("NoSlack", slack=False)
    owner = seed.user(org, "Owner")
    board = seed.board(org, owner)
    note = seed.note(board, owner)
    client.post(_url(note), json={"content": "Hello"}, headers=auth(owner))
    assert slack.sent == []


def test_delete_item_removes_its_comments(client, seed, team, auth):
    item = seed.item(team["note"], "a", 0)
    keep = seed.item(team["note"], "b", 1)
    gone_id = client.post(
        f"/api/checklist-items/{item.id}/comments", json={"content": "on a"}, headers=auth(team["bob"])
    ).json()["comment"]["id"]
    kept_id = client.post(
        f"/api/checklist-items/{keep.id}/comments", json={"content": "on b"}, headers=auth(team["bob"])
    ).json()["comment"]["id"]

    resp = client.delete(_url(team["note"], item.id), headers=auth(team["alice"]))
    assert resp.status_code == 200
    assert seed.get(Comment, gone_id) is None
    assert seed.fetch(Comment, checklist_item_id=item.id) == []
    assert seed.get(Comment, kept_id).deleted_at is None
