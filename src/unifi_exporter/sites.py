"""Selection of the sites an exporter instance monitors."""

from collections.abc import Sequence
from unifi_exporter.exceptions import SiteNotFoundError
from unifi_exporter.models import Site


def select_sites(requested: str, all_sites: Sequence[Site]) -> list[Site]:
    """Pick the sites to monitor.

    Args:
        requested: Site description to monitor; empty selects every site
        all_sites: Sites known to the controller

    Returns:
        All sites in their original order, or the single site whose
        description equals ``requested``

    Raises:
        SiteNotFoundError: If no site description equals ``requested``
    """
    if requested == '':
        return list(all_sites)

    for site in all_sites:
        if site.description == requested:
            return [site]

    raise SiteNotFoundError(requested, known=sites_string(all_sites))


def sites_string(sites: Sequence[Site]) -> str:
    """Comma-separated site descriptions, for log output."""
    return ', '.join(site.description for site in sites)
