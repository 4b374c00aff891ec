"""
Time model for refclock-time.

Calendar arithmetic, epoch conversion, fixed-point fraction codecs, the leap
second table and GPS leap second week resolution. The public names are
re-exported from the top-level package.
"""
