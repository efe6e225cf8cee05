"""
Plain-text message bodies for notifications and stats reports.
"""
from uptime.services.stats import Stats

MAX_INCIDENTS_SHOWN = 10


def format_down_message(
    service_name: str, consecutive_failures: int, last_error: str | None
) -> str:
    return (
        f"Service: {service_name}\n\n"
        f"Status: DOWN\n\n"
        f"The service has failed {consecutive_failures} consecutive health checks.\n\n"
        f"Last Error: {last_error or 'Unknown error'}\n\n"
        f"Please investigate immediately."
    )


def format_up_message(service_name: str, downtime_checks: int) -> str:
    return (
        f"Service: {service_name}\n\n"
        f"Status: UP\n\n"
        f"The service has recovered after {downtime_checks} failed health checks.\n\n"
        f"Service is now operational."
    )


def _format_incidents(stats: Stats) -> str:
    if not stats.incidents:
        return "No incidents in this period"

    blocks = []
    for index, incident in enumerate(stats.incidents[:MAX_INCIDENTS_SHOWN], start=1):
        ended = incident.end_time.isoformat() if incident.end_time else "Ongoing"
        blocks.append(
            f"{index}. Started: {incident.start_time.isoformat()}\n"
            f"   Ended: {ended}\n"
            f"   Duration: {incident.duration_minutes} minutes\n"
            f"   Error: {incident.error_message}"
        )

    text = "\n\n".join(blocks)
    hidden = len(stats.incidents) - MAX_INCIDENTS_SHOWN
    if hidden > 0:
        text += f"\n\n... and {hidden} more incidents"
    return text


def format_stats_message(service_name: str, stats: Stats, time_range: str) -> str:
    """Render a stats report for one time window."""
    if stats.total_checks == 0:
        return (
            f"Service: {service_name}\n\n"
            f"Time Range: {time_range}\n\n"
            f"No health checks found in this time period.\n\n"
            f"The monitoring system may not have been running during this time."
        )

    last_check = stats.last_check_time.isoformat() if stats.last_check_time else "Never"

    return (
        f"Service: {service_name}\n\n"
        f"Time Range: {time_range}\n\n"
        f"=== Summary ===\n"
        f"Current Status: {stats.current_status.upper()}\n"
        f"Last Check: {last_check}\n\n"
        f"=== Statistics ===\n"
        f"Total Checks: {stats.total_checks}\n"
        f"Successful Checks: {stats.successful_checks}\n"
        f"Failed Checks: {stats.failed_checks}\n"
        f"Uptime: {stats.uptime_percentage}%\n"
        f"Average Response Time: {stats.average_response_time}ms\n\n"
        f"=== Incidents ===\n"
        f"{_format_incidents(stats)}"
    )
