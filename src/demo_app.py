# CI/CD pipeline demo web app
import logging
import os
import time

from flask import Flask, Response, g, request
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

logger = logging.getLogger('demo_app')

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

TEXT_HEADERS = {'Content-Type': 'text/plain; charset=utf-8'}
METRICS_PATH = '/metrics'

app = Flask(__name__)

# Prometheus metrics
REQUEST_COUNT = Counter(
    'demo_http_requests_total',
    'HTTP requests served by the CI/CD demo app',
    ['method', 'endpoint', 'status']
)
REQUEST_LATENCY = Histogram(
    'demo_http_request_latency_seconds',
    'Time spent serving HTTP requests in the CI/CD demo app',
    ['endpoint']
)


def configure_logging(level=None):
    logging.basicConfig(
        level=level or LOG_LEVEL,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )


def server_options():
    """Read host, port and debug flag for the development server from the environment."""
    return {
        'host': os.getenv('APP_HOST', '0.0.0.0'),
        'port': int(os.getenv('APP_PORT', '8080')),
        'debug': os.getenv('APP_DEBUG', 'false').lower() == 'true',
    }


@app.before_request
def mark_request_start():
    if request.path != METRICS_PATH:
        g.started_at = time.perf_counter()


@app.after_request
def observe_request(response):
    """Update the request counter and latency histogram, then log the request."""
    if request.path == METRICS_PATH:
        return response

    elapsed = time.perf_counter() - g.get('started_at', time.perf_counter())
    # unmatched paths share one label so the series stay bounded
    endpoint = request.endpoint or 'unknown'
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(elapsed)
    REQUEST_COUNT.labels(request.method, endpoint, response.status_code).inc()
    logger.debug('%s %s -> %s (%.4fs)', request.method, request.path,
                 response.status_code, elapsed)
    return response


@app.route(METRICS_PATH)
def metrics():
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)


@app.route('/')
def home():
    return 'Welcome to CI/CD Demo Application!', 200, TEXT_HEADERS


@app.route('/hello/<name>')
def hello(name):
    return f'Hello, {name}!', 200, TEXT_HEADERS


# liveness/readiness probe
@app.route('/health')
def health():
    return 'OK', 200, TEXT_HEADERS


def main():
    configure_logging()
    options = server_options()
    logger.info('Starting CI/CD demo application on %s:%s', options['host'], options['port'])
    logger.info('Endpoints:')
    logger.info('- GET /               # welcome message')
    logger.info('- GET /hello/<name>   # greeting')
    logger.info('- GET /health         # health check')
    logger.info('- GET /metrics        # Prometheus metrics')
    app.run(**options)


if __name__ == '__main__':
    main()
