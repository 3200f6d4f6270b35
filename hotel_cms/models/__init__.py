from .admin import Admin
from .category import HotelCategory
from .price import Price
from .gallery import GalleryImage
