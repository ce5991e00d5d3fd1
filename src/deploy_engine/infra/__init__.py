"""External collaborators: the cluster, helm, terraform and chart templates."""
