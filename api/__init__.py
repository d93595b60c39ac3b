"""Portfolio Analytics HTTP service"""
