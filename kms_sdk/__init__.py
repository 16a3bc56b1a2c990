"""AWS KMS operations for flow-based automation nodes.

Credentials are declared as references (literal, flow, global, env or msg)
on a shared KMSServiceConfig and resolved on every request; KMSNode turns
each inbound message into exactly one encrypt, decrypt or generateDataKey
call and exactly one outbound message.
"""
