"""
Business operations. Routes build a CallerContext and call these; every
function checks authorization first and raises StorefrontError subclasses.
"""
