"""MapReduce coordinator, worker and their RPC messages."""