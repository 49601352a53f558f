import requests


class PreFlightCheckError(Exception):
    """Custom exception for pre-flight check failures."""
    pass


def run_pre_flight_checks(config: dict, *, check_network: bool = True):
    """
    Verifies that both ends of the migration are reachable and configured.

    Args:
        config: The application configuration dictionary.
        check_network: When False only the configuration values are checked.

    Raises:
        PreFlightCheckError: If any check fails.
    """
    print("[INFO] Running pre-flight checks...")

    sanity = config.get("sanity", {})
    wp_base = (config.get("wordpress", {}).get("base_url") or "").rstrip("/")
    wp_timeout = config.get("wordpress", {}).get("timeout", 30)
    sanity_timeout = sanity.get("timeout", 30)

    if not sanity.get("token"):
        raise PreFlightCheckError("Missing Sanity write token (sanity.token or SANITY_TOKEN).")
    for field in ("project_id", "dataset", "api_version"):
        if not sanity.get(field):
            raise PreFlightCheckError(f"Missing sanity.{field} in the configuration.")
    if not wp_base:
        raise PreFlightCheckError("Missing wordpress.base_url in the configuration.")

    if not check_network:
        print("[INFO] Pre-flight checks passed (configuration only).")
        return

    # Check 1: WordPress REST API answers
    try:
        response = requests.get(f"{wp_base}/wp-json/wp/v2/posts", params={"per_page": 1}, timeout=wp_timeout)
        response.raise_for_status()
    except requests.HTTPError as e:
        raise PreFlightCheckError(f"Unexpected response from the WordPress REST API: {e}")
    except requests.RequestException as e:
        raise PreFlightCheckError(f"Network error while contacting WordPress: {e}")

    # Check 2: Sanity token is accepted for the dataset
    query_url = (
        f"https://{sanity['project_id']}.api.sanity.io/v{sanity['api_version']}"
        f"/data/query/{sanity['dataset']}"
    )
    try:
        response = requests.get(
            query_url,
            params={"query": "count(*[_type == 'post'])"},
            headers={"Authorization": f"Bearer {sanity['token']}"},
            timeout=sanity_timeout,
        )
        response.raise_for_status()
    except requests.HTTPError as e:
        if e.response is not None and e.response.status_code in (401, 403):
            raise PreFlightCheckError("The Sanity token is invalid or lacks access to the dataset.")
        raise PreFlightCheckError(f"Unexpected error while checking the Sanity dataset: {e}")
    except requests.RequestException as e:
        raise PreFlightCheckError(f"Network error while contacting Sanity: {e}")

    print("[INFO] Pre-flight checks passed successfully.")
