"""
Main entry point for the campaign performance dashboard.
"""
import logging
import streamlit as st

from config.settings import config_manager
from data.manager import DataManager
from business_logic.dashboard_controller import DashboardController
from business_logic.error_handler import error_handler
from models.data_models import RegionMetric
from ui.views import DemographicView, DeviceView, RegionView, WeeklyView

# Set up logging
logger = logging.getLogger(__name__)

VIEW_NAMES = ["Demographic", "Device", "Regional", "Weekly"]


def get_controller() -> DashboardController:
    """Keep one controller per session so cached data and metrics survive reruns."""
    if 'dashboard_controller' not in st.session_state:
        config = config_manager.load_config()
        data_manager = DataManager(
            source=config.data_source,
            cache_ttl_minutes=config.cache_ttl_minutes,
            request_timeout=config.request_timeout_seconds,
        )
        st.session_state['dashboard_controller'] = DashboardController(
            data_manager, top_regions_limit=config.top_regions_limit
        )
    return st.session_state['dashboard_controller']


def build_views(controller: DashboardController):
    config = config_manager.load_config()
    return {
        "Demographic": DemographicView(controller),
        "Device": DeviceView(controller),
        "Regional": RegionView(controller, RegionMetric.parse(config.default_region_metric)),
        "Weekly": WeeklyView(controller),
    }


def main():
    """Main application entry point."""
    st.set_page_config(
        page_title="Campaign Performance Dashboard",
        page_icon="📊",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    controller = get_controller()
    views = build_views(controller)

    with st.sidebar:
        st.title("📊 Campaign Insights")
        selected = st.radio("View", VIEW_NAMES, key="selected_view")

    with st.spinner("Loading marketing data..."):
        state = controller.load_view_state()

    views[selected].render(state)

    with st.sidebar.expander("System Information"):
        render_system_info(controller)
        if st.button("🔄 Reload data"):
            controller.data_manager.clear_cache()
            controller.metrics_cache.clear()
            st.rerun()


def render_system_info(controller: DashboardController):
    """Show data source, cache, metrics and error statistics."""
    config = config_manager.load_config()
    st.write(f"**Data source:** {config.data_source}")
    st.write(f"**Cache TTL:** {config.cache_ttl_minutes} minutes")

    stats = controller.data_manager.get_cache_stats()
    st.write(f"**Campaigns loaded:** {stats['campaigns']}")
    st.write(f"**Last refreshed:** {stats['last_updated'] or 'never'}")

    for name, counts in controller.metrics_cache.get_stats().items():
        st.write(f"**{name}:** {counts['hits']} hits, {counts['misses']} misses")

    error_stats = error_handler.get_error_statistics()
    st.write(f"**Errors (total):** {error_stats['total_errors']}")
    if error_stats['total_errors']:
        st.write(f"**Errors (last 24h):** {error_stats['recent_errors_24h']}")
    if controller.last_notification:
        st.write(f"**Last error:** {controller.last_notification['title']} "
                 f"at {controller.last_notification['timestamp']}")


if __name__ == "__main__":
    main()
