from lifelog.services.dashboard_service import (
    get_dashboard_stats,
    compute_streak,
    parse_period,
)
from lifelog.services.insights import (
    generate_daily_insights,
    generate_weekly_summary,
    semantic_search,
)

__all__ = [
    'get_dashboard_stats',
    'compute_streak',
    'parse_period',
    'generate_daily_insights',
    'generate_weekly_summary',
    'semantic_search',
]
