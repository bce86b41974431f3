"""Connection configuration constants: single source of truth for all env vars."""

import os

# WordPress site hosting the component library
WP_BASE_URL = os.getenv("WP_BASE_URL", "")

# REST resource collection holding components (e.g. "posts", "pages", "elementor_library")
WP_POST_TYPE = os.getenv("WP_POST_TYPE", "posts")

# REST API root below the site URL
WP_API_ROOT = os.getenv("WP_API_ROOT", "wp-json/wp/v2")

# Application password credentials: both or neither
WP_USERNAME = os.getenv("WP_USERNAME", "")
WP_APPLICATION_PASSWORD = os.getenv("WP_APPLICATION_PASSWORD", "")
