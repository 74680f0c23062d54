"""
NumPy-backed implementations of the stridegrad contracts: strided CPU
storage, device dispatch, autograd nodes and driver, the Tensor facade, the
scalar graph, logging and configuration helpers.
"""
