"""Task records, settings and the TaskStore facade."""
