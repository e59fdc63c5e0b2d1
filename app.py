#!/usr/bin/env python3
"""
Log Viewer - upload a log file and browse it as a filterable table.
"""

import logging
import os
from datetime import datetime, timezone

from flask import Flask, Response, render_template, request, jsonify, current_app
from flask_socketio import SocketIO, emit
from werkzeug.exceptions import HTTPException, NotFound, RequestEntityTooLarge

from log_export import export_filename, filter_records, level_counts, records_to_csv
from log_parser import LogRecord, parse_log_content

ALLOWED_EXTENSIONS = {'.log'}
ALLOWED_MIMETYPES = {'text/plain'}


def allowed_file(file):
    """Accept .log files and anything the browser labels as plain text."""
    extension = os.path.splitext(file.filename)[1].lower()
    return extension in ALLOWED_EXTENSIONS or file.mimetype in ALLOWED_MIMETYPES


def create_app(config=None):
    """Application factory for creating Flask app instances."""
    app = Flask(__name__)
    app.logger.setLevel(logging.INFO)

    # Configuration from environment, overridable by config dict
    app.config['PORT'] = int(os.environ.get('PORT', '3000'))
    app.config['MAX_UPLOAD_MB'] = int(os.environ.get('MAX_UPLOAD_MB', '10'))
    app.config['BATCH_SIZE'] = int(os.environ.get('BATCH_SIZE', '500'))
    app.config['APP_ENV'] = os.environ.get('APP_ENV', 'development')

    # Apply config overrides
    if config:
        app.config.update(config)

    app.config['MAX_CONTENT_LENGTH'] = app.config['MAX_UPLOAD_MB'] * 1024 * 1024

    # SocketIO
    socketio = SocketIO(app, async_mode='threading')
    app.socketio = socketio

    @app.before_request
    def log_request():
        current_app.logger.info('%s %s', request.method, request.path)

    # --- Routes ---

    @app.route('/')
    @app.route('/log-viewer')
    def index():
        """Main log viewer page."""
        return render_template('index.html', max_upload_mb=current_app.config['MAX_UPLOAD_MB'])

    @app.route('/health')
    def health():
        return jsonify({
            'status': 'ok',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'environment': current_app.config['APP_ENV'],
        })

    @app.route('/upload', methods=['POST'])
    def upload():
        """Parse an uploaded log file and return its records."""
        file = request.files.get('logFile')
        if file is None or file.filename == '':
            return jsonify({'error': 'No file uploaded'}), 400
        if not allowed_file(file):
            return jsonify({'error': 'Only .log files are allowed!'}), 400

        data = file.read()
        content = data.decode('utf-8', errors='replace')
        records = parse_log_content(content)
        current_app.logger.info('Parsed %s: %d bytes, %d lines', file.filename, len(data), len(records))

        return jsonify({
            'success': True,
            'fileName': file.filename,
            'fileSize': len(data),
            'logLines': [record.to_dict() for record in records],
            'totalLines': len(records),
            'levels': level_counts(records),
        })

    @app.route('/export', methods=['POST'])
    def export():
        """Return the filtered records as a CSV download."""
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({'error': 'Expected a JSON object'}), 400
        lines = payload.get('logLines')
        if not isinstance(lines, list):
            return jsonify({'error': 'logLines must be a list'}), 400

        try:
            records = [LogRecord.from_dict(line) for line in lines if isinstance(line, dict)]
        except (TypeError, ValueError):
            return jsonify({'error': 'Invalid lineNumber in logLines'}), 400

        search = str(payload.get('search') or '')
        level = str(payload.get('level') or '')
        records = filter_records(records, search, level)
        filename = export_filename(str(payload.get('fileName') or ''))
        return Response(
            records_to_csv(records),
            mimetype='text/csv',
            headers={'Content-Disposition': f'attachment; filename="{filename}"'},
        )

    @app.route('/log/<path:filename>')
    def get_log(filename):
        """Uploaded files are never stored, so there is nothing to fetch."""
        return jsonify({'error': 'File not found - uploaded files are not persisted'}), 404

    # --- Error handlers ---

    @app.errorhandler(NotFound)
    def not_found(error):
        current_app.logger.warning('404 - Route not found: %s', request.path)
        return jsonify({'error': 'Route not found', 'path': request.path}), 404

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(error):
        limit = current_app.config['MAX_UPLOAD_MB']
        return jsonify({'error': f'File too large. Maximum size is {limit}MB.'}), 400

    @app.errorhandler(Exception)
    def handle_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'error': error.description}), error.code
        current_app.logger.exception('Error handling %s %s', request.method, request.url)
        body = {'error': 'Something went wrong!'}
        if current_app.config['APP_ENV'] != 'production':
            body['details'] = str(error)
        return jsonify(body), 500

    # --- SocketIO ---

    @socketio.on('connect')
    def handle_connect():
        """Handle client connection."""
        emit('connected', {'status': 'ok'})

    @socketio.on('parse_log')
    def handle_parse_log(data):
        """Parse content sent over the socket and stream records back in batches."""
        data = data if isinstance(data, dict) else {}
        content = data.get('content')
        file_name = data.get('fileName', '')
        if not isinstance(content, str):
            emit('parse_error', {'error': 'No log content received'})
            return

        records = parse_log_content(content)
        batch_size = max(1, current_app.config['BATCH_SIZE'])
        for offset in range(0, len(records), batch_size):
            emit('log_batch', {
                'fileName': file_name,
                'offset': offset,
                'logLines': [record.to_dict() for record in records[offset:offset + batch_size]],
            })
        emit('parse_complete', {'fileName': file_name, 'totalLines': len(records)})

    return app, socketio


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app, socketio = create_app()

    port = app.config['PORT']
    print("Log Viewer starting...")
    print(f"Max upload size: {app.config['MAX_UPLOAD_MB']}MB")
    print(f"Listening on http://0.0.0.0:{port}")
    socketio.run(app, host='0.0.0.0', port=port, debug=False, allow_unsafe_werkzeug=True)
