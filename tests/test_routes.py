import base64


def test_render_returns_png(client):
    response = client.post('/api/markdown/render', json={'markdown': '# Hello\n**bold** and *italic*'})
    assert response.status_code == 200
    assert response.headers['Content-Type'] == 'image/png'
    assert response.data.startswith(b'\x89PNG')


def test_render_base64(client):
    response = client.post('/api/markdown/render', json={'markdown': '---', 'return_format': 'base64'})
    assert response.status_code == 200
    image = base64.b64decode(response.get_json()['image'])
    assert image.startswith(b'\x89PNG')


def test_render_accepts_form_field(client):
    response = client.post('/api/markdown/render', data={'markdown': '- item'})
    assert response.status_code == 200
    assert response.data.startswith(b'\x89PNG')


def test_render_rejects_long_input(client):
    response = client.post('/api/markdown/render', json={'markdown': 'x' * 6001})
    assert response.status_code == 413
    assert '6000' in response.get_json()['error']


def test_render_rejects_non_text_input(client):
    response = client.post('/api/markdown/render', json={'markdown': 42})
    assert response.status_code == 400
    assert 'string' in response.get_json()['error']


def test_render_respects_configured_limit(app):
    app.config['MARKDOWN_MAX_LENGTH'] = 10
    response = app.test_client().post('/api/markdown/render', json={'markdown': 'x' * 11})
    assert response.status_code == 413


def test_blocks_describe_lines(client):
    response = client.post('/api/markdown/blocks',
                           json={'markdown': '# Hi\n**b** x\n1. one\n> q\n---'})
    assert response.status_code == 200
    lines = response.get_json()['lines']
    assert [line['kind'] for line in lines] == ['heading', 'paragraph', 'list_item', 'blockquote', 'rule']
    assert lines[0]['level'] == 1
    assert lines[1]['spans'] == [
        {'kind': 'bold', 'text': 'b', 'start': 0, 'end': 5},
        {'kind': 'plain', 'text': ' x', 'start': 5, 'end': 7},
    ]
    assert lines[2]['ordered'] is True
    assert 'spans' not in lines[3]


def test_blocks_reject_long_input(client):
    response = client.post('/api/markdown/blocks', json={'markdown': 'x' * 6001})
    assert response.status_code == 413
    assert 'error' in response.get_json()


def test_fonts_listing(client):
    response = client.get('/api/fonts')
    assert response.status_code == 200
    payload = response.get_json()
    assert payload['emoji'] == 'Apple Emoji'
    assert isinstance(payload['families'], list)


def test_index_page(client):
    response = client.get('/')
    assert response.status_code == 200
    assert b'markdown' in response.data


def test_unknown_route_is_json(client):
    response = client.get('/nope')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Not found'}
