#!/usr/bin/env python3
"""
Flask Web Application for MinIO Statemap
Provides REST API endpoints for converting MinIO trace output to statemap data.
"""

from flask import Flask, request, jsonify, send_file
from werkzeug.utils import secure_filename
import io
import os
import tempfile
from minio_statemap import StatemapConverter, StatemapError
from minio_statemap.core.types import DEFAULT_HOST, DEFAULT_TITLE
from minio_statemap.logging_config import get_logger, setup_logging
from minio_statemap.web import prepare_summary

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 500 * 1024 * 1024
app.config['UPLOAD_FOLDER'] = tempfile.gettempdir()

ALLOWED_EXTENSIONS = {'json', 'out', 'txt', 'log'}

logger = get_logger('web')


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def _uploaded_trace():
    """Validate the uploaded trace file. Returns (file, error_response)."""
    if 'file' not in request.files:
        return None, (jsonify({'error': 'No file provided'}), 400)

    file = request.files['file']

    if not file.filename:
        return None, (jsonify({'error': 'No file selected'}), 400)

    if not allowed_file(file.filename):
        return None, (jsonify({'error': 'Invalid file type. Only JSON trace files are allowed.'}), 400)

    return file, None


def _aggregate_upload(converter, file):
    # Unique path per upload; concurrent uploads may share a filename
    fd, filepath = tempfile.mkstemp(
        prefix='trace-',
        suffix=f"-{secure_filename(file.filename)}",
        dir=app.config['UPLOAD_FOLDER']
    )
    os.close(fd)
    try:
        file.save(filepath)
        return converter.aggregate_file(filepath)
    finally:
        os.remove(filepath)


@app.route('/api/convert', methods=['POST'])
def convert_api():
    """
    API endpoint to convert a trace file to statemap data.
    Accepts: multipart/form-data with fields:
      - 'file': MinIO trace file (`mc admin trace --json` output)
      - 'title': statemap title (optional, default: 'MinIO')
      - 'cluster': cluster name (optional, default: 'minio cluster')
    Returns: statemap data as a text attachment
    """
    file, error = _uploaded_trace()
    if error:
        return error

    converter = StatemapConverter(
        title=request.form.get('title', DEFAULT_TITLE),
        host=request.form.get('cluster', DEFAULT_HOST)
    )

    try:
        trace = _aggregate_upload(converter, file)
    except StatemapError as e:
        return jsonify({'error': str(e)}), 400

    out = io.StringIO()
    summary = converter.write(trace, out)

    response = send_file(
        io.BytesIO(out.getvalue().encode('utf-8')),
        mimetype='text/plain',
        as_attachment=True,
        download_name=f"{os.path.splitext(secure_filename(file.filename))[0]}.statemap"
    )
    response.headers['X-Statemap-Events'] = str(summary.event_count)
    response.headers['X-Statemap-Violations'] = str(summary.violation_count)
    return response


@app.route('/api/summary', methods=['POST'])
def summary_api():
    """
    API endpoint to validate a trace file without producing statemap data.
    Accepts: multipart/form-data with 'file' field
    Returns: JSON with states, entities and ordering violations
    """
    file, error = _uploaded_trace()
    if error:
        return error

    converter = StatemapConverter()

    try:
        trace = _aggregate_upload(converter, file)
    except StatemapError as e:
        return jsonify({'error': str(e)}), 400

    summary = converter.summarize(trace)
    return jsonify(prepare_summary(trace, summary))


if __name__ == '__main__':
    setup_logging()
    logger.info("Starting statemap API on port 5001")
    app.run(debug=True, host='0.0.0.0', port=5001)
