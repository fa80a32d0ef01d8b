"""fwhistory - Samsung firmware history lookup with changelogs."""
