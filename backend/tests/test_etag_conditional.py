from tests.test_utils_seed import seed_user_with_role, login


def test_etag_conditional_permissions(client):
    seed_user_with_role('etag@example.com', 'ETagRole', ['system.roles.view_page'])
    headers = login(client, 'etag@example.com')
    first = client.get('/iam/permissions?limit=5', headers=headers)
    assert first.status_code == 200
    etag = first.headers.get('ETag')
    assert etag
    # Conditional request
    second = client.get('/iam/permissions?limit=5', headers={**headers, 'If-None-Match': etag})
    assert second.status_code == 304
    assert second.headers.get('ETag') == etag
    # Quoted and listed tags are honoured too
    third = client.get('/iam/permissions?limit=5', headers={**headers, 'If-None-Match': f'"other", "{etag}"'})
    assert third.status_code == 304


def test_etag_changes_with_page(client):
    seed_user_with_role('etag.page@example.com', 'ETagPageRole', ['system.roles.view_page'])
    headers = login(client, 'etag.page@example.com')
    first = client.get('/iam/permissions?limit=5', headers=headers)
    other = client.get('/iam/permissions?limit=5&offset=5', headers={**headers, 'If-None-Match': first.headers['ETag']})
    assert other.status_code == 200
    assert other.headers['ETag'] != first.headers['ETag']
