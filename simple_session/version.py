"""Simple Session Meta information.
   Simple Session keeps per-client data on the server, encrypted at rest.
"""
__title__ = 'simple_session'
__description__ = (
   'Simple Session keeps per-client data on the server, '
   'encrypted at rest, with flash messages and identifier rotation.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/simple-session'
