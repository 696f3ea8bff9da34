"""Test authentication endpoints."""
import json

def test_health_check(client):
    """Test auth health endpoint."""
    response = client.get('/api/auth/health')
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['message'] == 'Auth service is running'

def test_app_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json()['status'] == 'healthy'

def test_login_success(client, school):
    """Test successful login."""
    response = client.post('/api/auth/login',
        json={
            'email': 'lecturer@example.com',
            'password': 'password123'
        })

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['error'] == False
    assert 'access_token' in data['data']
    assert data['data']['user']['role'] == 'lecturer'

def test_login_invalid_credentials(client, school):
    """Test login with invalid credentials."""
    response = client.post('/api/auth/login',
        json={
            'email': 'lecturer@example.com',
            'password': 'wrongpassword'
        })

    assert response.status_code == 401

def test_login_requires_fields(client):
    response = client.post('/api/auth/login', json={})
    assert response.status_code == 400

def test_get_current_user(client, school):
    """Test get current user profile."""
    login_response = client.post('/api/auth/login',
        json={
            'email': 'alice@example.com',
            'password': 'password123'
        })

    token = json.loads(login_response.data)['data']['access_token']

    response = client.get('/api/auth/me',
        headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['data']['email'] == 'alice@example.com'
    assert 'password_hash' not in data['data']

def test_me_requires_token(client):
    response = client.get('/api/auth/me')
    assert response.status_code == 401
    assert response.get_json()['message'] == 'Authorization token required'
