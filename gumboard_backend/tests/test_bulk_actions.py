from models.notes import Note


def _bulk_url(board):
    return f"/api/boards/{board.id}/notes/bulk-actions"


def test_bulk_archive_and_unarchive(client, seed, team, auth):
    board = team["board"]
    notes = [team["note"], seed.note(board, team["alice"])]
    ids = [n.id for n in notes]
    headers = auth(team["alice"])

    resp = client.put(_bulk_url(board), json={"ids": ids, "archivedAt": "2024-05-01T12:00:00Z"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "action": "archived", "count": 2}
    assert all(seed.get(Note, i).archived_at is not None for i in ids)

    resp = client.put(_bulk_url(board), json={"ids": ids, "archivedAt": None}, headers=headers)
    assert resp.json() == {"success": True, "action": "unarchived", "count": 2}
    assert all(seed.get(Note, i).archived_at is None for i in ids)


def test_bulk_archive_is_all_or_nothing_on_authorship(client, seed, team, auth):
    board = team["board"]
    mine = team["note"]
    theirs = seed.note(board, team["bob"])
    resp = client.put(
        _bulk_url(board),
        json={"ids": [mine.id, theirs.id], "archivedAt": "2024-05-01T12:00:00Z"},
        headers=auth(team["alice"]),
    )
    assert resp.status_code == 403
    assert seed.get(Note, mine.id).archived_at is None
    assert seed.get(Note, theirs.id).archived_at is None


def test_bulk_delete_is_all_or_nothing_on_missing_ids(client, seed, team, auth):
    board = team["board"]
    mine = team["note"]
    resp = client.request(
        "DELETE",
        _bulk_url(board),
        json={"ids": [mine.id, "does-not-exist"]},
        headers=auth(team["alice"]),
    )
    assert resp.status_code == 404
    assert resp.json()["code"] == "SOME_NOT_FOUND"
    assert seed.get(Note, mine.id).deleted_at is None


def test_bulk_delete_rejects_already_deleted_notes(client, seed, team, auth):
    gone = seed.note(team["board"], team["alice"], deleted=True)
    resp = client.request(
        "DELETE",
        _bulk_url(team["board"]),
        json={"ids": [team["note"].id, gone.id]},
        headers=auth(team["alice"]),
    )
    assert resp.status_code == 404
    assert seed.get(Note, team["note"].id).deleted_at is None


def test_bulk_delete_by_admin(client, seed, team, auth):
    board = team["board"]
    ids = [team["note"].id, seed.note(board, team["bob"]).id]
    resp = client.request("DELETE", _bulk_url(board), json={"ids": ids}, headers=auth(team["admin"]))
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "deleted": 2}
    assert all(seed.get(Note, i).deleted_at is not None for i in ids)


def test_bulk_actions_reject_empty_ids(client, team, auth):
    resp = client.put(_bulk_url(team["board"]), json={"ids": [], "archivedAt": None}, headers=auth(team["alice"]))
    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_FAILED"


def test_bulk_on_another_organization_board_is_denied(client, seed, team, auth):
    other_org = seed.organization("Globex")
    outsider = seed.user(other_org, "Mallory", role="ADMIN")
    resp = client.request(
        "DELETE",
        _bulk_url(team["board"]),
        json={"ids": [team["note"].id]},
        headers=auth(outsider),
    )
    assert resp.status_code == 403
    assert seed.get(Note, team["note"].id).deleted_at is None


def test_bulk_delete_endpoint_is_strict(client, seed, team, auth):
    board = team["board"]
    mine = team["note"]
    theirs = seed.note(board, team["bob"])
    url = f"/api/boards/{board.id}/notes/bulk-delete"

    resp = client.post(url, json={"noteIds": [mine.id, theirs.id]}, headers=auth(team["alice"]))
    assert resp.status_code == 403
    assert seed.get(Note, mine.id).deleted_at is None

    resp = client.post(url, json={"noteIds": [mine.id]}, headers=auth(team["alice"]))
    assert resp.status_code == 200
    assert resp.json() == {"deleted": 1, "deletedIds": [mine.id]}


def test_bulk_delete_endpoint_requires_ids(client, team, auth):
    resp = client.post(f"/api/boards/{team['board'].id}/notes/bulk-delete", json={"noteIds": []}, headers=auth(team["alice"]))
    assert resp.status_code == 400


def test_repeated_id_counts_as_unresolved(client, seed, team, auth):
    note = team["note"]
    resp = client.request(
        "DELETE",
        _bulk_url(team["board"]),
        json={"ids": [note.id, note.id]},
        headers=auth(team["alice"]),
    )
    assert resp.status_code == 404
    assert resp.json()["code"] == "SOME_NOT_FOUND"
    assert seed.get(Note, note.id).deleted_at is None
