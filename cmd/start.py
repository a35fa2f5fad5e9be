#!/usr/bin/env python3
"""
Storefront orchestration - loads the catalog and starts the Flask HTTP server
"""
import signal
import sys

from bookstall.config import get_config
from bookstall.events import ALL_EVENTS
from bookstall.http_app import create_app
from bookstall.logging import configure_logging
from bookstall.storefront import Storefront


def signal_handler(signum, frame):
    """Handle shutdown signals"""
    logger.info("Received shutdown signal", signal=signum)
    sys.exit(0)


def main():
    """Main entry point"""
    global logger
    
    config = get_config()
    logger = configure_logging(config.service_name, config.log_level, config.log_json)
    logger.info("Starting storefront",
                feed_configured=config.feed_configured,
                notifier_configured=config.notifier_configured)
    
    try:
        storefront = Storefront.from_config(config)
        storefront.bus.subscribe(ALL_EVENTS, lambda event: logger.debug(
            "Domain event", event_type=event.event_type, payload=event.payload))
        storefront.refresh()
        logger.info("Catalog ready",
                    status=storefront.catalog.status.value,
                    items=len(storefront.catalog.items))
        
        app = create_app(storefront)
        
        signal.signal(signal.SIGTERM, signal_handler)
        signal.signal(signal.SIGINT, signal_handler)
        
        from werkzeug.serving import run_simple
        logger.info("Storefront HTTP server starting", port=config.http_port)
        run_simple(
            '0.0.0.0',
            config.http_port,
            app,
            use_reloader=False,
            use_debugger=False,
            threaded=True
        )
    except Exception as e:
        logger.error("Fatal error", error=str(e), exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
