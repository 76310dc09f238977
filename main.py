from dotenv import load_dotenv
load_dotenv()

import sys
import os

sys.path.append(os.path.abspath(os.path.dirname(__file__)))
from api.main import create_app

# Serve with: uvicorn main:app
app = create_app()
