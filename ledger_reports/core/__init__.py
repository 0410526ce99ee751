# Aggregation
from .aggregator import MonthlyAggregator, aggregate
from .trend import monthly_totals, project, project_buckets

__all__ = ['MonthlyAggregator', 'aggregate', 'monthly_totals', 'project', 'project_buckets']
