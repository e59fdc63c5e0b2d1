"""Tests for WebSocket (SocketIO) functionality."""


class TestSocketIOConnection:
    """Tests for SocketIO connect/disconnect."""

    def test_connect(self, app, socketio):
        """Client connects and receives 'connected' event."""
        sio_client = socketio.test_client(app)
        assert sio_client.is_connected()

        received = sio_client.get_received()
        event_names = [r['name'] for r in received]
        assert 'connected' in event_names

        connected_data = next(r for r in received if r['name'] == 'connected')
        assert connected_data['args'][0] == {'status': 'ok'}

        sio_client.disconnect()


class TestParseLogEvent:
    """Tests for streaming parsed records over the socket."""

    def test_streams_batches(self, app, socketio, sample_log_bytes):
        sio_client = socketio.test_client(app)
        sio_client.get_received()

        sio_client.emit('parse_log', {
            'fileName': 'sample_app.log',
            'content': sample_log_bytes.decode('utf-8'),
        })
        received = sio_client.get_received()

        batches = [r['args'][0] for r in received if r['name'] == 'log_batch']
        # BATCH_SIZE is 5 in tests, fixture has 12 records
        assert [b['offset'] for b in batches] == [0, 5, 10]
        assert [len(b['logLines']) for b in batches] == [5, 5, 2]

        line_numbers = [line['lineNumber'] for b in batches for line in b['logLines']]
        assert line_numbers == list(range(1, 13))

        complete = next(r['args'][0] for r in received if r['name'] == 'parse_complete')
        assert complete == {'fileName': 'sample_app.log', 'totalLines': 12}
        assert received[-1]['name'] == 'parse_complete'

        sio_client.disconnect()

    def test_empty_content_completes_without_batches(self, app, socketio):
        sio_client = socketio.test_client(app)
        sio_client.get_received()

        sio_client.emit('parse_log', {'fileName': 'empty.log', 'content': '\n\n'})
        received = sio_client.get_received()
        assert [r['name'] for r in received] == ['parse_complete']
        assert received[0]['args'][0]['totalLines'] == 0

        sio_client.disconnect()

    def test_missing_content_reports_error(self, app, socketio):
        sio_client = socketio.test_client(app)
        sio_client.get_received()

        sio_client.emit('parse_log', {'fileName': 'x.log'})
        received = sio_client.get_received()
        assert [r['name'] for r in received] == ['parse_error']
        assert received[0]['args'][0] == {'error': 'No log content received'}

        sio_client.disconnect()
