"""
Entry point for hosts that launch ``app.py`` (Streamlit Community Cloud).

``streamlit run app.py`` renders the OSCA landing page defined in
Welcome.py. ``pages/`` sits next to this file, so the Senior Citizens page
stays in the sidebar either way.
"""

import Welcome  # noqa: F401
