import logging


logger = logging.getLogger('freshdesksync')
logger.addHandler(logging.NullHandler())
