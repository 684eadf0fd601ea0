"""RPC value encoding, linearizability checking and MapReduce."""

__version__ = "0.1.0"