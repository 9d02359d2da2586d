"""Allow ``python -m k8s_cluster_check``."""

from k8s_cluster_check.cli.app import main

main()
