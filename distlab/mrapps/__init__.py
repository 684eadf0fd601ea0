"""MapReduce applications providing map and reduce functions."""