"""Tests for the HTTP routes and Socket.IO events."""

import random

import pytest

from app import create_app
from conftest import FakeNarrator, force_roles


@pytest.fixture
def server():
    app, socketio = create_app(narrator=FakeNarrator(), rng=random.Random(1), async_mode='threading')
    app.testing = True
    return app, socketio


@pytest.fixture
def client(server):
    return server[0].test_client()


def new_game(client, names=("Hana", "Ada", "Ben", "Cara")):
    created = client.post('/api/games', json={'hostName': names[0]}).get_json()
    ids = {names[0]: created['hostId']}
    for name in names[1:]:
        joined = client.post('/api/join', json={'playerName': name, 'gameCode': created['gameCode']})
        ids[name] = joined.get_json()['playerId']
    return created['gameId'], ids


@pytest.fixture
def started(client):
    game_id, ids = new_game(client)
    response = client.post(f'/api/games/{game_id}/start', json={'hostId': ids['Hana']})
    assert response.status_code == 200
    force_roles(game_id, {ids['Hana']: 'FAITHFUL', ids['Ada']: 'FAITHFUL',
                          ids['Ben']: 'FAITHFUL', ids['Cara']: 'TRAITOR'})
    return game_id, ids


class TestRoutes:
    def test_health(self, client):
        data = client.get('/api/health').get_json()

        assert data['status'] == 'healthy'
        assert data['autoPhaseRunning'] is False

    def test_lobby_flow(self, client):
        game_id, ids = new_game(client)

        state = client.get(f'/api/games/{game_id}').get_json()

        assert state['status'] == 'WAITING'
        assert [p['name'] for p in state['players']] == ['Hana', 'Ada', 'Ben', 'Cara']

    def test_start_reports_role_counts(self, client):
        game_id, ids = new_game(client)

        data = client.post(f'/api/games/{game_id}/start', json={'hostId': ids['Hana']}).get_json()

        assert data['success'] is True
        assert (data['traitorCount'], data['faithfulCount']) == (1, 3)

    def test_full_game(self, client, started):
        game_id, ids = started
        for voter, target in (('Hana', 'Ada'), ('Ben', 'Ada'), ('Ada', 'Ben'), ('Cara', 'Hana')):
            response = client.post(f'/api/games/{game_id}/vote',
                                   json={'voterId': ids[voter], 'targetId': ids[target]})
            assert response.status_code == 200

        day = client.post(f'/api/games/{game_id}/next-phase', json={'hostId': ids['Hana']}).get_json()
        client.post(f'/api/games/{game_id}/vote', json={'voterId': ids['Cara'], 'targetId': ids['Ben']})
        night = client.post(f'/api/games/{game_id}/next-phase', json={'hostId': ids['Hana']}).get_json()

        assert day['success'] is True
        assert day['eliminatedPlayerId'] == ids['Ada']
        assert (day['nextPhase'], day['nextDay']) == ('NIGHT', 1)
        assert night['gameEnded'] is True
        assert night['winner'] == 'TRAITORS'

        reveal = client.get(f'/api/games/{game_id}/reveal').get_json()
        assert reveal['game']['winner'] == 'TRAITORS'
        assert len(reveal['votes']) == 5

    def test_role_filtering(self, client, started):
        game_id, ids = started

        state = client.get(f'/api/games/{game_id}?playerId={ids["Cara"]}').get_json()

        assert {p['name']: p['role'] for p in state['players']} == {
            'Hana': None, 'Ada': None, 'Ben': None, 'Cara': 'TRAITOR'
        }


class TestErrors:
    def test_unknown_game(self, client):
        response = client.get('/api/games/does-not-exist')

        assert response.status_code == 404
        assert response.get_json() == {'error': 'Game not found'}

    def test_missing_fields(self, client, started):
        game_id, _ = started

        response = client.post(f'/api/games/{game_id}/vote', json={})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Voter ID and target ID are required'

    def test_non_json_body(self, client, started):
        game_id, _ = started

        response = client.post(f'/api/games/{game_id}/vote', data='voter=1')

        assert response.status_code == 400

    def test_non_host_advance(self, client, started):
        game_id, ids = started

        response = client.post(f'/api/games/{game_id}/next-phase', json={'hostId': ids['Ada']})

        assert response.status_code == 403

    def test_faithful_night_vote(self, client, started):
        game_id, ids = started
        client.post(f'/api/games/{game_id}/next-phase', json={'hostId': ids['Hana']})

        response = client.post(f'/api/games/{game_id}/vote',
                               json={'voterId': ids['Ada'], 'targetId': ids['Ben']})

        assert response.status_code == 403
        assert response.get_json()['error'] == 'Only traitors can vote during night phase'

    def test_lock_contention(self, server, client, started):
        game_id, ids = started
        locks = server[0].extensions['whispers']['game_manager'].locks
        locks.acquire(game_id)

        try:
            response = client.post(f'/api/games/{game_id}/next-phase', json={'hostId': ids['Hana']})
        finally:
            locks.release(game_id)

        assert response.status_code == 409
        assert response.get_json()['retryable'] is True

    def test_string_enabled_flag_is_rejected(self, client, started):
        game_id, ids = started

        response = client.post(f'/api/games/{game_id}/auto-phase',
                               json={'hostId': ids['Hana'], 'enabled': 'false'})

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Enabled must be true or false'}
        assert client.get(f'/api/games/{game_id}/auto-phase').get_json()['autoPhaseEnabled'] is False

    def test_reveal_before_end(self, client, started):
        game_id, _ = started

        response = client.get(f'/api/games/{game_id}/reveal')

        assert response.status_code == 400

    def test_unknown_route(self, client):
        assert client.get('/api/nothing-here').status_code == 404

    def test_invalid_object_id(self, client, started):
        game_id, ids = started

        response = client.post(f'/api/games/{game_id}/room/interact',
                               json={'playerId': ids['Ada'], 'objectId': 'first', 'action': 'VISIT'})

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Invalid object ID'}


class TestSideFeatures:
    def test_auto_phase_routes(self, client, started):
        game_id, ids = started

        configured = client.post(f'/api/games/{game_id}/auto-phase',
                                 json={'hostId': ids['Hana'], 'enabled': True, 'durationHours': 6})
        status = client.get(f'/api/games/{game_id}/auto-phase').get_json()
        sweep = client.post('/api/auto-phase-check').get_json()

        assert configured.status_code == 200
        assert status['autoPhaseEnabled'] is True
        assert status['timeRemaining'] > 0
        assert sweep['gamesChecked'] == 1
        assert sweep['results'][0]['action'] == 'no_action'

    def test_whispers(self, client, started):
        game_id, ids = started

        sent = client.post(f'/api/games/{game_id}/whispers', json={
            'fromPlayerId': ids['Ada'], 'toPlayerId': ids['Ben'], 'content': 'Watch Cara'
        })
        inbox = client.get(f'/api/games/{game_id}/whispers?playerId={ids["Ben"]}').get_json()

        assert sent.status_code == 200
        assert inbox['received'][0]['content'] == 'Watch Cara'

    def test_missions(self, client, started):
        game_id, ids = started

        client.post('/api/missions/generate', json={'gameId': game_id, 'hostId': ids['Hana']})
        missions = client.get(f'/api/games/{game_id}/missions?playerId={ids["Ben"]}').get_json()['missions']
        toggled = client.post(f'/api/games/{game_id}/missions/{missions[0]["id"]}/toggle',
                              json={'playerId': ids['Ben']}).get_json()

        assert toggled['mission']['completed'] is True

    def test_narration_and_chaos(self, client, started):
        game_id, ids = started

        narration = client.post('/api/narration/generate', json={'gameId': game_id, 'hostId': ids['Hana']})
        chaos = client.post('/api/events/chaos', json={'gameId': game_id, 'hostId': ids['Hana']})

        assert narration.get_json()['narration'] == 'Night falls on day 1.'
        assert chaos.get_json()['event']['type'] == 'AI_GENERATED'

    def test_room(self, client, started):
        game_id, ids = started
        room = client.get(f'/api/games/{game_id}/room?playerId={ids["Ada"]}').get_json()

        result = client.post(f'/api/games/{game_id}/room/interact', json={
            'playerId': ids['Ada'], 'objectId': room['roomObjects'][0]['id'], 'action': 'destroy'
        }).get_json()
        logs = client.get(f'/api/games/{game_id}/room/log').get_json()['logs']

        assert result['newState'] == 'DESTROYED'
        assert logs[0]['content'] == result['logContent']


class TestSocketEvents:
    def test_connect(self, server):
        app, socketio = server
        sio = socketio.test_client(app)

        received = sio.get_received()

        assert received[0]['name'] == 'connected'

    def test_join_game_and_receive_updates(self, server, client, started):
        app, socketio = server
        game_id, ids = started
        sio = socketio.test_client(app)
        sio.get_received()

        sio.emit('join_game', {'gameId': game_id, 'playerId': ids['Cara']})
        joined = sio.get_received()
        client.post(f'/api/games/{game_id}/next-phase', json={'hostId': ids['Hana']})
        pushed = sio.get_received()

        assert joined[0]['name'] == 'game_updated'
        assert joined[0]['args'][0]['gameId'] == game_id
        advanced = [m for m in pushed if m['name'] == 'phase_advanced']
        assert advanced[0]['args'][0]['nextPhase'] == 'NIGHT'

    def test_join_unknown_game(self, server):
        app, socketio = server
        sio = socketio.test_client(app)
        sio.get_received()

        sio.emit('join_game', {'gameId': 'missing'})

        received = sio.get_received()
        assert received[0]['name'] == 'error'
        assert received[0]['args'][0]['message'] == 'Game not found'
