from flask import Flask, Response

from config import FeedConfig
from feed_log import cleanup_old_logs, set_log_file
from publish import FeedPublisher
from serializer import mimetype_for


def create_app(config=None, publisher=None):
    config = config or FeedConfig.from_env()
    set_log_file(config.log_file)
    cleanup_old_logs()
    publisher = publisher or FeedPublisher(config)

    app = Flask(__name__)
    app.config["FEED"] = config

    @app.route("/")
    def index():
        return f"<h2>{config.title}</h2><a href='/rss'>RSS Feed</a>"

    @app.route("/rss")
    def rss():
        # Republishes on every request unless the refresh policy allows reusing the cache
        return Response(publisher.publish(), mimetype=mimetype_for(config.feed_format))

    return app


if __name__ == "__main__":
    create_app().run(debug=True, port=5000)
